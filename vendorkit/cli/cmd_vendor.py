"""CLI - vendor 目录查看与清理"""

from __future__ import annotations

import click

from vendorkit.cli import _svc, handle_errors
from vendorkit.core.dep.identity import parse_reference


def register(group: click.Group) -> None:
    group.add_command(vendored)
    group.add_command(clean)


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
def vendored(directory: str) -> None:
    """列出已拉取到 dependencies 目录的依赖"""
    with handle_errors():
        entries = _svc().vendor_tree(directory).list_vendored()
    if not entries:
        click.echo("没有已拉取的依赖。")
        return
    for e in entries:
        name = f"{e['owner']}/{e['repository']}"
        state = e["commit"] or "未完成"
        mark = " (有清单)" if e["manifest"] else ""
        click.echo(f"  {name:40s} {state}{mark}")


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--name", default=None, help="只清理指定依赖，格式: owner/repository")
def clean(directory: str, name: str | None) -> None:
    """删除已拉取的依赖（下次 ensure 时重新拉取）"""
    owner = repository = None
    if name:
        with handle_errors():
            ident = parse_reference(name)
        owner, repository = ident.owner, ident.repository
    count = _svc().vendor_tree(directory).clean(owner, repository)
    click.echo(f"已清理 {count} 个依赖目录。")
