"""
Basic tests for declarations and deployment planning.
"""

import pytest
from larafleet.errors import ConfigurationError
from larafleet.planner import (
    ServiceRole,
    default_public_ports,
    load_declarations,
    parse_declarations,
    plan_apps,
    plan_deployment,
)
from larafleet.planner.build_files import ensure_dockerignore_allows_build, prepare_deployment_script


def make_app(**kw):
    base = {
        "name": "MyApp",
        "link": [
            {"kind": "postgres", "host": "db.local", "port": 5432, "database": "app", "username": "u", "password": "p"},
        ],
        "web": {"domain": "example.com"},
        "workers": [
            {"name": "queue", "horizon": True, "scheduler": True},
            {"tasks": {"reports": {"command": "php artisan reports:work", "dependencies": ["laravel-horizon"]}}},
        ],
        "config": {"environment": {"vars": {"SESSION_DRIVER": "redis"}}},
    }
    base.update(kw)
    return parse_declarations(base)[0]


class TestDeclarations:
    """Test loading and validating declarations."""

    def test_single_app(self):
        app = make_app()
        assert app.name == "MyApp"
        assert app.web.domain_name == "example.com"
        assert app.config.opcache is True

    def test_apps_list(self):
        apps = parse_declarations({"apps": [{"name": "One"}, {"name": "Two"}]})
        assert [a.name for a in apps] == ["One", "Two"]

    def test_missing_name(self):
        with pytest.raises(ConfigurationError, match="name"):
            parse_declarations({"web": {}})

    def test_unknown_attribute_rejected(self):
        app = make_app(link=[{"kind": "redis", "hostname": "x"}])
        with pytest.raises(ConfigurationError, match="hostname"):
            app.bindings()

    def test_template_override(self):
        app = make_app(link=[{"kind": "redis", "host": "cache", "port": 6379, "environment": {"CACHE_URL": "redis://{host}:{port}"}}])
        binding = app.bindings()[0]
        assert binding.overrides[0](binding.resource) == {"CACHE_URL": "redis://cache:6379"}

    def test_template_format_error(self):
        app = make_app(link=[{"kind": "redis", "host": "cache", "environment": {"CACHE_HOST": "{host:d}"}}])
        binding = app.bindings()[0]
        with pytest.raises(ConfigurationError, match="cannot be rendered"):
            binding.overrides[0](binding.resource)

    def test_template_unknown_placeholder(self):
        app = make_app(link=[{"kind": "redis", "host": "cache", "environment": {"X": "{nope}"}}])
        with pytest.raises(ConfigurationError, match="nope"):
            app.bindings()

    def test_unknown_kind_binding(self):
        app = make_app(link=[{"kind": "dynamo", "table": "t"}])
        assert app.bindings()[0].resource.type_name == "dynamo"

    def test_domain_object(self):
        app = make_app(web={"domain": {"name": "shop.example.com", "cert": "arn:aws:acm:cert"}})
        assert app.web.domain_name == "shop.example.com"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Could not find"):
            load_declarations(tmp_path / "larafleet.yaml")

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "larafleet.yaml"
        path.write_text("name: MyApp\nworkers:\n  - horizon: true\nconfig:\n  environment:\n    autoInject: false\n")
        app = load_declarations(path)[0]
        assert app.workers[0].horizon is True
        assert app.config.environment.auto_inject is False


class TestPlanner:
    """Test service plans and build files."""

    def test_services(self, tmp_path):
        plans = plan_deployment(make_app(), app_path=tmp_path, build_path=tmp_path / "build")
        assert [p.name for p in plans] == ["MyApp-Web", "MyApp-queue", "MyApp-worker-2"]
        assert [p.role for p in plans] == [ServiceRole.WEB, ServiceRole.WORKER, ServiceRole.WORKER]

    def test_web_environment_and_ports(self, tmp_path):
        web = plan_deployment(make_app(), app_path=tmp_path, build_path=tmp_path / "build")[0]
        assert web.environment["DB_CONNECTION"] == "pgsql"
        assert web.environment["SESSION_DRIVER"] == "redis"
        assert web.environment["APP_URL"] == "https://example.com"
        assert web.ports == [
            {"listen": "80/http", "forward": "8080/http"},
            {"listen": "443/https", "forward": "8080/http"},
        ]
        assert web.image.args["CONTAINER_TYPE"] == "web"
        assert web.image.args["AUTORUN_LARAVEL_MIGRATION"] == "true"

    def test_workers_share_environment(self, tmp_path):
        plans = plan_deployment(make_app(), app_path=tmp_path, build_path=tmp_path / "build")
        assert plans[1].environment == plans[0].environment
        assert plans[2].environment == plans[0].environment

    def test_ports_without_domain(self):
        assert default_public_ports(None) == [{"listen": "80/http", "forward": "8080/http"}]

    def test_image_defaults(self, tmp_path):
        worker = plan_deployment(make_app(), app_path=tmp_path, build_path=tmp_path / "build")[1]
        args = worker.image.args
        assert args["PHP_VERSION"] == "8.4"
        assert args["PHP_OPCACHE_ENABLE"] == "1"
        assert args["CONTAINER_TYPE"] == "worker"
        assert args["AUTORUN_LARAVEL_MIGRATION"] == "false"
        assert args["ENV_FILENAME"] == ".env"
        assert args["CUSTOM_CONF_PATH"] == "build/worker-queue"
        assert worker.image.dockerfile == ".larafleet/docker/Dockerfile.worker"
        assert worker.container_overrides == {"linuxParameters": {"initProcessEnabled": False}}

    def test_php_and_opcache(self, tmp_path):
        app = make_app(config={"php": 8.2, "opcache": False})
        web = plan_deployment(app, app_path=tmp_path, build_path=tmp_path / "build")[0]
        assert web.image.args["PHP_VERSION"] == "8.2"
        assert web.image.args["PHP_OPCACHE_ENABLE"] == "0"

    def test_unsupported_php(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Unsupported PHP version"):
            plan_deployment(make_app(config={"php": 5.6}), app_path=tmp_path, build_path=tmp_path / "build")

    def test_worker_trees_written(self, tmp_path):
        plans = plan_deployment(make_app(), app_path=tmp_path, build_path=tmp_path / "build")
        assert [r.name for r in plans[1].records] == ["laravel-horizon", "laravel-scheduler"]
        rc = tmp_path / "build" / "worker-worker-2" / "etc" / "s6-overlay" / "s6-rc.d"
        assert (rc / "reports" / "dependencies").read_text() == "laravel-horizon"
        assert (rc / "user" / "contents.d" / "reports").exists()

    def test_overlay_gets_linked_variables(self, tmp_path):
        (tmp_path / ".env.production").write_text("APP_NAME=demo")
        app = make_app(config={"environment": {"file": ".env.production", "vars": {"X": "1"}}})
        plan_deployment(app, app_path=tmp_path, build_path=tmp_path / "build")
        overlay = (tmp_path / "build" / "deploy" / ".env").read_text()
        assert overlay.startswith("APP_NAME=demo")
        assert "DB_HOST=db.local" in overlay
        assert "X=1" not in overlay

    def test_overlay_without_auto_inject(self, tmp_path):
        (tmp_path / ".env").write_text("APP_NAME=demo")
        app = make_app(config={"environment": {"file": ".env", "autoInject": False}})
        web = plan_deployment(app, app_path=tmp_path, build_path=tmp_path / "build")[0]
        assert (tmp_path / "build" / "deploy" / ".env").read_text() == "APP_NAME=demo"
        assert "DB_HOST" not in web.environment

    def test_deploy_script_default(self, tmp_path):
        plan_deployment(make_app(), app_path=tmp_path, build_path=tmp_path / "build")
        assert (tmp_path / "build" / "deploy" / "60-deploy.sh").read_text() == "#!/bin/sh\nexit 0\n"

    def test_duplicate_worker_names(self, tmp_path):
        app = make_app(workers=[
            {"name": "worker-2", "tasks": {"a": {"command": "php artisan a"}}},
            {"tasks": {"b": {"command": "php artisan b"}}},
        ])
        with pytest.raises(ConfigurationError, match="Duplicate worker name 'worker-2'"):
            plan_deployment(app, app_path=tmp_path, build_path=tmp_path / "build")
        assert not (tmp_path / "build").exists()

    def test_replan_drops_removed_tasks(self, tmp_path):
        build = tmp_path / "build"
        old = make_app(workers=[{"name": "queue", "horizon": True, "tasks": {"old": {"command": "php artisan old"}}}])
        plan_deployment(old, app_path=tmp_path, build_path=build)
        plan_deployment(make_app(workers=[{"name": "queue", "horizon": True}]), app_path=tmp_path, build_path=build)
        rc = build / "worker-queue" / "etc" / "s6-overlay" / "s6-rc.d"
        assert sorted(p.name for p in rc.iterdir()) == ["laravel-horizon", "user"]
        assert sorted(p.name for p in (rc / "user" / "contents.d").iterdir()) == ["laravel-horizon"]

    def test_role_dockerignore_patched(self, tmp_path):
        ignore = tmp_path / "Dockerfile.worker.dockerignore"
        ignore.write_text("build")
        plan_deployment(make_app(), app_path=tmp_path, build_path=tmp_path / "build")
        assert "!build" in ignore.read_text().split("\n")

    def test_apps_get_separate_build_dirs(self, tmp_path):
        apps = parse_declarations({"apps": [
            {"name": "One", "link": [{"kind": "postgres", "host": "one.db"}], "config": {"environment": {"file": ".env"}}},
            {"name": "Two", "link": [{"kind": "postgres", "host": "two.db"}], "config": {"environment": {"file": ".env"}}},
        ]})
        (tmp_path / ".env").write_text("APP_NAME=demo")
        plans = plan_apps(apps, app_path=tmp_path, build_path=tmp_path / "build")
        assert list(plans) == ["One", "Two"]
        assert "DB_HOST=one.db" in (tmp_path / "build" / "One" / "deploy" / ".env").read_text()
        two = (tmp_path / "build" / "Two" / "deploy" / ".env").read_text()
        assert "DB_HOST=two.db" in two
        assert "one.db" not in two

    def test_single_app_uses_build_path(self, tmp_path):
        plan_apps([make_app()], app_path=tmp_path, build_path=tmp_path / "build")
        assert (tmp_path / "build" / "deploy" / "60-deploy.sh").exists()

    def test_duplicate_app_names(self, tmp_path):
        apps = parse_declarations({"apps": [{"name": "One"}, {"name": "One"}]})
        with pytest.raises(ConfigurationError, match="Duplicate app names: One"):
            plan_apps(apps, app_path=tmp_path, build_path=tmp_path / "build")


class TestBuildFiles:
    """Test deploy script and dockerignore helpers."""

    def test_deploy_script_copied(self, tmp_path):
        (tmp_path / "deploy.sh").write_text("#!/bin/sh\nphp artisan migrate --force\n")
        dst = prepare_deployment_script(tmp_path, "deploy.sh", tmp_path / "deploy")
        assert "migrate" in dst.read_text()

    def test_dockerignore_patched_once(self, tmp_path):
        ignore = tmp_path / ".dockerignore"
        ignore.write_text(".sst\nvendor")
        assert ensure_dockerignore_allows_build(tmp_path, tmp_path / ".sst" / "laravel") is True
        assert ensure_dockerignore_allows_build(tmp_path, tmp_path / ".sst" / "laravel") is False
        assert ignore.read_text().count("!.sst/laravel") == 1

    def test_no_dockerignore(self, tmp_path):
        assert ensure_dockerignore_allows_build(tmp_path, tmp_path / "build") is False
