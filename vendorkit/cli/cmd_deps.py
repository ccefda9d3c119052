"""CLI - 清单与依赖解析命令"""

from __future__ import annotations

import click

from vendorkit.cli import _svc, handle_errors
from vendorkit.core.dep.manifest import PackageManifest
from vendorkit.core.dep.resources import applicable_resources, current_platform


def register(group: click.Group) -> None:
    group.add_command(ensure)
    group.add_command(validate)
    group.add_command(info)
    group.add_command(resources)


def _load_root(directory: str) -> PackageManifest:
    manifest = PackageManifest.load(directory, is_root=True)
    if manifest is None:
        raise click.ClickException(f"目录下没有清单文件 (vendorkit.json / vendorkit.yaml): {directory}")
    return manifest


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--skip-validate", is_flag=True, help="不校验 entry/output（纯库包）")
def ensure(directory: str, skip_validate: bool) -> None:
    """拉取包的全部依赖（含传递依赖）到 dependencies 目录"""
    with handle_errors():
        manifest = _load_root(directory)
        if not skip_validate:
            manifest.validate()
        deps = _svc().resolver.ensure_dependencies(manifest)

    if not deps:
        click.echo("没有声明任何依赖。")
        return
    click.echo(f"已就绪 {len(deps)} 个依赖:")
    for dep in deps:
        click.echo(f"  {str(dep):40s} {dep.commit[:12]}")


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
def validate(directory: str) -> None:
    """校验包清单"""
    with handle_errors():
        manifest = _load_root(directory)
        manifest.validate()
    click.echo(f"清单有效: {manifest.entry} -> {manifest.output}")


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
def info(directory: str) -> None:
    """显示包标识、地址和声明的依赖"""
    with handle_errors():
        manifest = _load_root(directory)
    host = _svc().config.host
    click.echo(f"包:     {manifest.identity_string()}")
    click.echo(f"地址:   {manifest.canonical_url(host)}")
    click.echo(f"格式:   {manifest.format}")
    if manifest.entry or manifest.output:
        click.echo(f"入口:   {manifest.entry or '-'} -> {manifest.output or '-'}")
    if manifest.website:
        click.echo(f"网站:   {manifest.website}")
    if manifest.contributors:
        click.echo(f"贡献者: {', '.join(manifest.contributors)}")
    if manifest.dependencies:
        click.echo("依赖:")
        for dep in manifest.dependencies:
            click.echo(f"  - {dep}")


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--platform", default=None, help="目标平台（默认当前平台）")
def resources(directory: str, platform: str | None) -> None:
    """列出适用于目标平台的资源"""
    with handle_errors():
        manifest = _load_root(directory)
    target = platform or current_platform()
    selected = applicable_resources(manifest, target)
    if not selected:
        click.echo(f"没有适用于 {target} 的资源。")
        return
    for res in selected:
        kind = "archive" if res.archive else "file"
        click.echo(f"  {res.name:30s} [{kind}] {res.platform or '*'}")
