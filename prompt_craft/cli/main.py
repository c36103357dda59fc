"""PromptCraft CLI — craft command."""

from __future__ import annotations

import base64
import json
import mimetypes
import sys
from typing import Any

import click

from prompt_craft.cli.client import CraftClient


def _format_table(rows: list[dict], columns: list[str]) -> str:
    """Simple table formatter."""
    if not rows:
        return "No results."
    widths = {c: len(c) for c in columns}
    for row in rows:
        for c in columns:
            widths[c] = max(widths[c], len(str(row.get(c, ""))))

    header = "  ".join(c.upper().ljust(widths[c]) for c in columns)
    separator = "  ".join("-" * widths[c] for c in columns)
    lines = [header, separator]
    for row in rows:
        lines.append("  ".join(str(row.get(c, "")).ljust(widths[c]) for c in columns))
    return "\n".join(lines)


@click.group()
@click.option("--api", default="http://localhost:8400", envvar="CRAFT_API", help="API base URL")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.option("--user", default=None, envvar="CRAFT_USER", help="User id sent as X-User-ID")
@click.pass_context
def cli(ctx: click.Context, api: str, output_format: str, user: str | None) -> None:
    """PromptCraft CLI for building and versioning system prompts."""
    ctx.obj = CraftClient(base_url=api, user_id=user)
    ctx.meta["output_format"] = output_format


def _output(ctx: click.Context, data: Any, columns: list[str] | None = None) -> None:
    fmt = ctx.meta.get("output_format", "table")
    if fmt == "table" and isinstance(data, list) and columns:
        click.echo(_format_table(data, columns))
    else:
        click.echo(json.dumps(data, indent=2, default=str))


def _read_text(file_path: str | None) -> str:
    if file_path:
        with open(file_path) as f:
            return f.read()
    return sys.stdin.read()


def _confirm(yes: bool, message: str) -> None:
    if not yes:
        click.confirm(message, abort=True)


# --- Library commands ---


@cli.group()
def library() -> None:
    """Manage prompt libraries (categories)."""


@library.command("list")
@click.pass_context
def library_list(ctx: click.Context) -> None:
    """List libraries visible to the user."""
    client: CraftClient = ctx.obj
    rows = [
        {"id": lib["id"], "name": lib["name"], "team_id": lib.get("team_id") or "", "templates": len(lib["templates"])}
        for lib in client.list_libraries()
    ]
    _output(ctx, rows, ["name", "templates", "team_id", "id"])


@library.command("create")
@click.argument("name")
@click.option("--team", "team_id", default=None, help="Share the library with a team")
@click.pass_context
def library_create(ctx: click.Context, name: str, team_id: str | None) -> None:
    """Create a library."""
    client: CraftClient = ctx.obj
    _output(ctx, client.create_library(name, team_id))


@library.command("rename")
@click.argument("name")
@click.argument("new_name")
@click.pass_context
def library_rename(ctx: click.Context, name: str, new_name: str) -> None:
    """Rename a library."""
    client: CraftClient = ctx.obj
    _output(ctx, client.rename_library(name, new_name))


@library.command("delete")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def library_delete(ctx: click.Context, name: str, yes: bool) -> None:
    """Delete a library and every template in it."""
    client: CraftClient = ctx.obj
    _confirm(yes, f"Delete library '{name}' and all its templates?")
    client.delete_library(name)
    click.echo(f"Deleted library '{name}'")


# --- Template commands ---


@cli.group()
def template() -> None:
    """Manage templates inside a library."""


@template.command("list")
@click.argument("library_name")
@click.pass_context
def template_list(ctx: click.Context, library_name: str) -> None:
    """List the templates of a library."""
    client: CraftClient = ctx.obj
    for lib in client.list_libraries():
        if lib["name"].lower() == library_name.strip().lower():
            _output(ctx, lib["templates"], ["usecase", "prompt"])
            return
    raise click.ClickException(f"Library '{library_name}' not found")


@template.command("add")
@click.argument("library_name")
@click.argument("usecase")
@click.option("--file", "-f", "file_path", default=None, help="Read the prompt text from a file")
@click.pass_context
def template_add(ctx: click.Context, library_name: str, usecase: str, file_path: str | None) -> None:
    """Add a template. Reads the prompt text from --file or stdin."""
    client: CraftClient = ctx.obj
    _output(ctx, client.create_template(library_name, usecase, _read_text(file_path)))


@template.command("edit")
@click.argument("library_name")
@click.argument("usecase")
@click.option("--usecase", "new_usecase", default=None, help="New use-case name")
@click.option("--file", "-f", "file_path", default=None)
@click.pass_context
def template_edit(
    ctx: click.Context, library_name: str, usecase: str, new_usecase: str | None, file_path: str | None
) -> None:
    """Replace a template's text and optionally rename it."""
    client: CraftClient = ctx.obj
    result = client.update_template(
        library_name, usecase, new_usecase or usecase, _read_text(file_path)
    )
    _output(ctx, result)


@template.command("delete")
@click.argument("library_name")
@click.argument("usecase")
@click.option("--yes", "-y", is_flag=True)
@click.pass_context
def template_delete(ctx: click.Context, library_name: str, usecase: str, yes: bool) -> None:
    """Delete a template."""
    client: CraftClient = ctx.obj
    _confirm(yes, f"Delete template '{usecase}'?")
    client.delete_template(library_name, usecase)
    click.echo(f"Deleted template '{usecase}'")


@template.command("use")
@click.argument("prompt_id")
@click.argument("library_name")
@click.argument("usecase")
@click.pass_context
def template_use(ctx: click.Context, prompt_id: str, library_name: str, usecase: str) -> None:
    """Load a template's text into a prompt (switches to direct editing)."""
    client: CraftClient = ctx.obj
    result = client.use_template(prompt_id, library_name, usecase)
    click.echo(result["system_prompt"])


# --- Prompt commands ---


@cli.group()
def prompt() -> None:
    """Manage prompts."""


@prompt.command("list")
@click.argument("library_id")
@click.pass_context
def prompt_list(ctx: click.Context, library_id: str) -> None:
    """List the prompts of a library."""
    client: CraftClient = ctx.obj
    _output(ctx, client.list_prompts(library_id), ["id", "name"])


@prompt.command("create")
@click.argument("library_id")
@click.argument("name")
@click.pass_context
def prompt_create(ctx: click.Context, library_id: str, name: str) -> None:
    """Create a prompt from the default config."""
    client: CraftClient = ctx.obj
    _output(ctx, client.create_prompt(library_id, name))


@prompt.command("show")
@click.argument("prompt_id")
@click.pass_context
def prompt_show(ctx: click.Context, prompt_id: str) -> None:
    """Show a prompt with its config and versions."""
    client: CraftClient = ctx.obj
    _output(ctx, client.get_prompt(prompt_id))


@prompt.command("delete")
@click.argument("prompt_id")
@click.pass_context
def prompt_delete(ctx: click.Context, prompt_id: str) -> None:
    """Delete a prompt and its versions."""
    client: CraftClient = ctx.obj
    client.delete_prompt(prompt_id)
    click.echo(f"Deleted prompt '{prompt_id}'")


@prompt.command("set")
@click.argument("prompt_id")
@click.argument("field")
@click.argument("value", nargs=-1, required=True)
@click.pass_context
def prompt_set(ctx: click.Context, prompt_id: str, field: str, value: tuple[str, ...]) -> None:
    """Guided edit of one config field. Several values set a list field."""
    client: CraftClient = ctx.obj
    payload: Any = list(value) if len(value) > 1 else value[0]
    result = client.set_field(prompt_id, field, payload)
    click.echo(result["system_prompt"])


@prompt.command("text")
@click.argument("prompt_id")
@click.option("--file", "-f", "file_path", default=None)
@click.pass_context
def prompt_text(ctx: click.Context, prompt_id: str, file_path: str | None) -> None:
    """Direct edit: replace the prompt text from --file or stdin."""
    client: CraftClient = ctx.obj
    client.set_text(prompt_id, _read_text(file_path))
    click.echo("Text updated. Run 'craft prompt parse' to refresh the config.")


@prompt.command("parse")
@click.argument("prompt_id")
@click.pass_context
def prompt_parse(ctx: click.Context, prompt_id: str) -> None:
    """Parse the prompt text back into a structured config."""
    client: CraftClient = ctx.obj
    result = client.parse(prompt_id)
    _output(ctx, result["config"])


@prompt.command("suggest")
@click.argument("prompt_id")
@click.argument("field")
@click.pass_context
def prompt_suggest(ctx: click.Context, prompt_id: str, field: str) -> None:
    """Ask the AI to improve one config field."""
    client: CraftClient = ctx.obj
    click.echo(client.suggest(prompt_id, field)["suggestion"])


# --- Version commands ---


@cli.group()
def version() -> None:
    """Manage prompt versions."""


@version.command("history")
@click.argument("prompt_id")
@click.pass_context
def version_history(ctx: click.Context, prompt_id: str) -> None:
    """Show version history, newest first."""
    client: CraftClient = ctx.obj
    _output(ctx, client.list_versions(prompt_id), ["id", "created_at", "tag"])


@version.command("save")
@click.argument("prompt_id")
@click.pass_context
def version_save(ctx: click.Context, prompt_id: str) -> None:
    """Snapshot the current prompt text."""
    client: CraftClient = ctx.obj
    _output(ctx, client.save_version(prompt_id))


@version.command("restore")
@click.argument("prompt_id")
@click.argument("version_id")
@click.pass_context
def version_restore(ctx: click.Context, prompt_id: str, version_id: str) -> None:
    """Copy a version's text into the prompt."""
    client: CraftClient = ctx.obj
    result = client.restore_version(prompt_id, version_id)
    click.echo(result["system_prompt"])


@version.command("tag")
@click.argument("prompt_id")
@click.argument("version_id")
@click.argument("tag", type=click.Choice(["Production", "Beta", "Test", "none"]))
@click.pass_context
def version_tag(ctx: click.Context, prompt_id: str, version_id: str, tag: str) -> None:
    """Tag a version; 'none' clears the tag."""
    client: CraftClient = ctx.obj
    _output(ctx, client.tag_version(prompt_id, version_id, None if tag == "none" else tag))


@version.command("delete")
@click.argument("prompt_id")
@click.argument("version_id")
@click.option("--yes", "-y", is_flag=True)
@click.pass_context
def version_delete(ctx: click.Context, prompt_id: str, version_id: str, yes: bool) -> None:
    """Delete a version. The last remaining version cannot be deleted."""
    client: CraftClient = ctx.obj
    _confirm(yes, f"Delete version '{version_id}'?")
    result = client.delete_version(prompt_id, version_id)
    current = result.get("current") or {}
    click.echo(f"Deleted version '{version_id}'. Current version: {current.get('id')}")


# --- Playground ---


@cli.command()
@click.option("--file", "-f", "file_path", default=None, help="Config JSON file (default stdin)")
@click.pass_context
def assemble(ctx: click.Context, file_path: str | None) -> None:
    """Assemble a system prompt from a config (JSON)."""
    client: CraftClient = ctx.obj
    try:
        config = json.loads(_read_text(file_path))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid config JSON: {e}") from e
    click.echo(client.assemble(config)["system_prompt"])


def _image_data_url(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    if not mime or not mime.startswith("image/"):
        raise click.BadParameter(f"{path} is not an image file.", param_hint="--image")
    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


@cli.command()
@click.argument("prompt_id")
@click.argument("message", default="")
@click.option("--image", type=click.Path(exists=True, dir_okay=False), help="Attach an image file.")
@click.pass_context
def chat(ctx: click.Context, prompt_id: str, message: str, image: str | None) -> None:
    """Send one message to the AI using the prompt as system instructions."""
    if not message.strip() and not image:
        raise click.UsageError("Give a MESSAGE, an --image, or both.")
    client: CraftClient = ctx.obj
    image_url = _image_data_url(image) if image else None
    system_prompt = client.get_prompt(prompt_id)["system_prompt"]
    for fragment in client.chat(system_prompt, message, [], image=image_url):
        click.echo(fragment, nl=False)
    click.echo()


# --- Team ---


@cli.command()
@click.pass_context
def team(ctx: click.Context) -> None:
    """Show the user's team and members."""
    client: CraftClient = ctx.obj
    data = client.get_team()
    if not data.get("id"):
        click.echo("Not a member of any team.")
        return
    click.echo(f"Team: {data['name']}")
    _output(ctx, data["members"], ["user_id", "full_name", "role"])


@cli.command()
@click.argument("email")
@click.option("--role", type=click.Choice(["editor", "viewer"]), default="editor")
@click.pass_context
def invite(ctx: click.Context, email: str, role: str) -> None:
    """Invite someone to the user's team."""
    client: CraftClient = ctx.obj
    _output(ctx, client.invite(email, role))


if __name__ == "__main__":
    cli()
