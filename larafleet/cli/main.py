"""Main CLI entrypoint for Larafleet."""

import json
import logging
import sys
from typing import Any, Dict

import boto3
import click
from botocore.exceptions import BotoCoreError, ClientError

from .. import settings
from ..errors import LarafleetError
from ..locator import (
    find_cluster_arn,
    locate_cluster,
    locate_task,
    run_aws,
    ssh_command,
    tail_logs_command,
    task_log_group,
)
from ..planner import load_declarations, plan_apps


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log plan and lookup steps')
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.pass_context
def main(ctx, verbose, output_json):
    """Larafleet - Laravel deployments on AWS ECS."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    logging.basicConfig(
        level=logging.INFO if verbose else settings.get_log_level(),
        format='%(levelname)s %(name)s: %(message)s',
    )


def _json_output(data: Any) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None))


def _wants_json() -> bool:
    return click.get_current_context().obj.get('json', False)


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not _wants_json():
        click.echo(message)


def _fail(message: str) -> None:
    """Print one diagnostic line and exit non-zero."""
    if _wants_json():
        _json_output({'error': message})
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _ecs_client(region: str):
    return boto3.client('ecs', region_name=region)


def _stage_option(f):
    return click.option('--stage', '-s', required=True, help='Deployment stage name')(f)


def _region_option(f):
    return click.option('--region', '-r', default=settings.get_region, show_default='$AWS_REGION or us-east-1', help='AWS region')(f)


def _config_option(f):
    return click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
                        help='Declaration file (default: $LARAFLEET_CONFIG or larafleet.yaml)')(f)


@main.command()
@_config_option
@click.option('--app-path', type=click.Path(file_okay=False), default=None, help='Application root')
@click.option('--build-path', type=click.Path(file_okay=False), default=None, help='Directory for generated build files')
@click.pass_context
def plan(ctx, config_path, app_path, build_path):
    """Resolve environment and supervision files for every declared service."""
    try:
        apps = load_declarations(config_path or settings.get_config_path())
        plans = []
        for app_plans in plan_apps(apps, app_path=app_path, build_path=build_path).values():
            plans.extend(app_plans)
    except (LarafleetError, OSError) as e:
        _fail(str(e))

    if _wants_json():
        _json_output([p.to_dict() for p in plans])
        return

    for p in plans:
        _print_plan_human(p.to_dict())


@main.command('locate-cluster')
@_stage_option
@click.option('--component', '-n', default=None, help='Component name (default: the single declared component)')
@_config_option
@_region_option
def locate_cluster_cmd(stage, component, config_path, region):
    """Print the cluster ARN for a stage."""
    try:
        ecs = _ecs_client(region)
        if component:
            cluster_arn = locate_cluster(ecs, stage, component)
        else:
            cluster_arn = find_cluster_arn(ecs, stage, declaration_path=config_path)
    except (LarafleetError, ClientError, BotoCoreError) as e:
        _fail(str(e))

    if _wants_json():
        _json_output({'cluster_arn': cluster_arn})
    else:
        click.echo(cluster_arn)


@main.command('locate-task')
@click.argument('service', required=False)
@_stage_option
@click.option('--cluster', '-c', default=None, help='ECS cluster ARN (default: auto-detected)')
@_config_option
@_region_option
def locate_task_cmd(service, stage, cluster, config_path, region):
    """Print the running task for SERVICE (web, worker or a worker name)."""
    try:
        ecs = _ecs_client(region)
        cluster_arn = find_cluster_arn(ecs, stage, cluster, config_path)
        task = locate_task(ecs, cluster_arn, service)
    except (LarafleetError, ClientError, BotoCoreError) as e:
        _fail(str(e))

    if _wants_json():
        _json_output({
            'cluster_arn': cluster_arn,
            'task_arn': task.task_arn,
            'task_id': task.task_id,
            'container': task.container_name,
            'status': task.last_status,
        })
    else:
        click.echo(f"{task.task_arn} {task.container_name} {task.last_status}")


@main.command()
@click.argument('service', required=False)
@_stage_option
@click.option('--cluster', '-c', default=None, help='ECS cluster ARN (default: auto-detected)')
@_config_option
@_region_option
def ssh(service, stage, cluster, config_path, region):
    """Open a shell in a running task."""
    try:
        ecs = _ecs_client(region)
        cluster_arn = find_cluster_arn(ecs, stage, cluster, config_path)
        _human_output(f"Cluster ARN: {cluster_arn}")
        task = locate_task(ecs, cluster_arn, service, prompt='Select a task to connect to:')
    except (LarafleetError, ClientError, BotoCoreError) as e:
        _fail(str(e))

    _human_output(f"Connecting to task: {task.task_id}")
    sys.exit(run_aws(ssh_command(cluster_arn, task), region))


@main.command()
@click.argument('service', required=False)
@_stage_option
@click.option('--cluster', '-c', default=None, help='ECS cluster ARN (default: auto-detected)')
@_config_option
@_region_option
@click.option('--since', default='10m', show_default=True, help='Start time for logs (e.g. 5m, 1h, 2d)')
@click.option('--follow/--no-follow', default=True, help='Follow log output')
def logs(service, stage, cluster, config_path, region, since, follow):
    """Stream CloudWatch logs from a running task."""
    try:
        ecs = _ecs_client(region)
        cluster_arn = find_cluster_arn(ecs, stage, cluster, config_path)
        task = locate_task(ecs, cluster_arn, service, prompt='Select a task to stream logs from:')
        log_group = task_log_group(ecs, task)
    except (LarafleetError, ClientError, BotoCoreError) as e:
        _fail(str(e))

    _human_output(f"Streaming logs from: {task.container_name}")
    _human_output(f"Log group: {log_group}\n")
    sys.exit(run_aws(tail_logs_command(log_group, since, follow), region))


def _print_plan_human(plan: Dict[str, Any]) -> None:
    """Print a service plan in human-readable format."""
    click.echo(f"📦 {click.style(plan['name'], bold=True)} ({plan['role']})")
    click.echo(f"  Dockerfile: {plan['image']['dockerfile']}")
    click.echo(f"  PHP: {plan['image']['args'].get('PHP_VERSION')}")

    for port in plan['ports']:
        click.echo(f"  Port: {port['listen']} -> {port['forward']}")

    if plan['environment']:
        click.echo(f"  Environment: {', '.join(sorted(plan['environment']))}")

    for task in plan['tasks']:
        deps = f" (after {', '.join(task['dependencies'])})" if task['dependencies'] else ""
        click.echo(f"  Task: {task['name']}{deps}")


if __name__ == '__main__':
    main()
