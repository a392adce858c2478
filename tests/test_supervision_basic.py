import stat

from larafleet.supervision import (
    WorkerTaskSpec,
    build_supervision_records,
    find_record,
    write_supervision_tree,
    s6_rc_dir,
    HORIZON_TASK,
    SCHEDULER_TASK,
)


def test_builtins_only():
    records = build_supervision_records([], horizon=True, scheduler=True)
    assert [r.name for r in records] == ["laravel-horizon", "laravel-scheduler"]
    assert all(r.dependencies == "" for r in records)
    assert all(r.type == "longrun" for r in records)
    assert records[0].script.endswith("php artisan horizon")
    assert records[1].script.endswith("php artisan schedule:work")


def test_no_builtins_no_tasks():
    assert build_supervision_records() == []


def test_script_and_run_bodies():
    records = build_supervision_records([WorkerTaskSpec(name="reports", command="php artisan reports:work")])
    record = records[0]
    assert record.script == "#!/command/with-contenv bash\ncd /var/www/html\nphp artisan reports:work"
    assert record.run == "#!/command/execlineb -P\n/etc/s6-overlay/s6-rc.d/reports/script"
    assert record.autostart


def test_user_task_overrides_builtin():
    tasks = {HORIZON_TASK: {"command": "php artisan horizon --environment=prod"}}
    records = build_supervision_records(tasks, horizon=True, scheduler=True)
    assert [r.name for r in records].count(HORIZON_TASK) == 1
    assert records[0].name == HORIZON_TASK
    assert records[0].script.endswith("php artisan horizon --environment=prod")
    assert find_record(records, SCHEDULER_TASK) is not None


def test_dependencies_joined_and_unknown_preserved():
    tasks = [
        WorkerTaskSpec(name="a", command="run-a"),
        WorkerTaskSpec(name="b", command="run-b", dependencies=["a", "does-not-exist"]),
    ]
    records = build_supervision_records(tasks)
    assert find_record(records, "b").dependencies == "a\ndoes-not-exist"


def test_mapping_input():
    records = build_supervision_records({"x": {"command": "cmd", "dependencies": ["y"]}})
    assert records[0].name == "x"
    assert records[0].dependencies == "y"


def test_write_tree(tmp_path):
    records = build_supervision_records(
        [WorkerTaskSpec(name="reports", command="php artisan reports:work", dependencies=[HORIZON_TASK])],
        horizon=True,
    )
    write_supervision_tree(records, tmp_path)

    rc = s6_rc_dir(tmp_path)
    assert rc == tmp_path / "etc" / "s6-overlay" / "s6-rc.d"

    for name in (HORIZON_TASK, "reports"):
        task_dir = rc / name
        assert (task_dir / "type").read_text() == "longrun"
        assert (task_dir / "script").stat().st_mode & stat.S_IXUSR
        assert (task_dir / "run").stat().st_mode & stat.S_IXUSR
        marker = rc / "user" / "contents.d" / name
        assert marker.exists()
        assert marker.read_text() == ""

    assert (rc / "reports" / "dependencies").read_text() == HORIZON_TASK
    assert (rc / HORIZON_TASK / "dependencies").read_text() == ""
    assert (rc / "reports" / "run").read_text().endswith("/etc/s6-overlay/s6-rc.d/reports/script")
