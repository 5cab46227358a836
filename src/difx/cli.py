"""Command-line interface for diff explanation."""

import asyncio
import sys

import click

from .config import Config, config_path, load_config, mask_secret, save_config
from .errors import DifxError
from .explainer import explain, stream_explanation
from .git_utils import build_diff_args, get_changed_files, get_diff
from .prompts import build_diff_prompt
from .providers import PROVIDERS, Provider, get_provider
from .render import SCHEMES, Renderer, render_text

# Prompt text for each credential field
_CREDENTIAL_PROMPTS = {
    "claude_api_key": ("Please enter your Claude API key", True),
    "azure_openai_key": ("Please enter your Azure OpenAI API key", True),
    "azure_openai_endpoint": ("Please enter your Azure OpenAI endpoint", False),
}


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _prompt_for_credentials(cfg: Config, missing: list[str]) -> None:
    """Ask for missing credentials and save them."""
    for name in missing:
        text, secret = _CREDENTIAL_PROMPTS[name]
        value = click.prompt(text, hide_input=secret, err=True)
        setattr(cfg, name, value.strip())
    save_config(cfg)


def _print_config(cfg: Config) -> None:
    click.echo(f"Config file: {config_path()}")
    click.echo(f"  active_model:             {cfg.active_model}")
    click.echo(f"  streaming:                {cfg.streaming}")
    click.echo(f"  markup:                   {cfg.markup}")
    click.echo(f"  claude_api_key:           {mask_secret(cfg.claude_api_key)}")
    click.echo(f"  claude_model:             {cfg.claude_model}")
    click.echo(f"  azure_openai_key:         {mask_secret(cfg.azure_openai_key)}")
    click.echo(f"  azure_openai_endpoint:    {cfg.azure_openai_endpoint or '(not set)'}")
    click.echo(f"  azure_openai_deployment:  {cfg.azure_openai_deployment}")


def _run(provider: Provider, prompt: str, cfg: Config) -> None:
    if cfg.streaming:
        asyncio.run(stream_explanation(provider, prompt, Renderer(cfg.markup)))
    else:
        result = asyncio.run(explain(provider, prompt))
        click.echo(render_text(result, cfg.markup), color=True)


class GitDiffCommand(click.Command):
    """Command that keeps the ``--`` separating revisions from paths in ``git_args``."""

    def parse_args(self, ctx, args):
        paths = None
        if "--" in args:
            index = args.index("--")
            args, paths = args[:index], args[index + 1 :]
        rest = super().parse_args(ctx, args)
        if paths is not None:
            # click drops the separator; git needs it for paths that no longer exist
            ctx.params["git_args"] = (*ctx.params.get("git_args", ()), "--", *paths)
        return rest


@click.group()
@click.version_option()
def cli():
    """AI-powered git diff explanations."""
    pass


@cli.command("explain", cls=GitDiffCommand, context_settings={"ignore_unknown_options": True})
@click.option("--patch", "-p", is_flag=True, default=False, help="Generate patch")
@click.option("--stat", is_flag=True, default=False, help="Generate diffstat")
@click.option("--name-only", is_flag=True, default=False, help="Show only names of changed files")
@click.option("--name-status", is_flag=True, default=False, help="Show only names and status of changed files")
@click.option("--diff-filter", default=None, help="Filter by added/modified/deleted")
@click.option("--unified", "-U", type=int, default=None, help="Show n lines of context")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show detailed output including the diff")
@click.argument("git_args", nargs=-1, type=click.UNPROCESSED)
def explain_diff(patch, stat, name_only, name_status, diff_filter, unified, verbose, git_args):
    """
    Explain the changes in a git diff.

    Accepts the same revisions and paths as git diff
    (e.g., difx explain HEAD~1 -- src/).
    """
    try:
        cfg = load_config()
        provider = get_provider(cfg)
        missing = provider.check_credentials()
        if missing:
            _prompt_for_credentials(cfg, missing)
    except DifxError as e:
        _fail(str(e))

    diff_args = build_diff_args(
        patch=patch,
        stat=stat,
        name_only=name_only,
        name_status=name_status,
        diff_filter=diff_filter,
        unified=unified,
        extra=git_args,
    )
    if verbose:
        click.echo(f"Running git diff {' '.join(diff_args)}".rstrip(), err=True)

    try:
        diff_content = get_diff(diff_args)
    except DifxError as e:
        _fail(str(e))

    if not diff_content.strip():
        click.echo("No differences found.")
        return

    changed_files = get_changed_files(diff_content)

    if verbose:
        click.echo(diff_content, err=True)

    prompt = build_diff_prompt(diff_content, markup=cfg.markup)

    mode = "streaming" if cfg.streaming else "batch"
    click.echo(f"Explaining changes ({len(changed_files)} files)...", err=True)
    if verbose:
        click.echo(f"Running {provider.name} ({provider.model}, {mode}, {cfg.markup} markup)...", err=True)

    try:
        _run(provider, prompt, cfg)
    except DifxError as e:
        _fail(str(e))


@cli.command()
@click.option("--model", "-m", type=click.Choice(list(PROVIDERS)), default=None, help="Model to use")
@click.option("--claude-api-key", default=None, help="Claude API key")
@click.option("--azure-api-key", default=None, help="Azure OpenAI API key")
@click.option("--azure-endpoint", default=None, help="Azure OpenAI endpoint URL")
@click.option("--stream/--no-stream", default=None, help="Stream the explanation as it arrives")
@click.option("--markup", type=click.Choice(list(SCHEMES)), default=None, help="Color marking convention")
def configure(model, claude_api_key, azure_api_key, azure_endpoint, stream, markup):
    """Show or update the saved configuration."""
    updates = {
        "active_model": model,
        "claude_api_key": claude_api_key,
        "azure_openai_key": azure_api_key,
        "azure_openai_endpoint": azure_endpoint,
        "streaming": stream,
        "markup": markup,
    }
    updates = {k: v for k, v in updates.items() if v is not None}

    try:
        cfg = load_config()
        if updates:
            for name, value in updates.items():
                setattr(cfg, name, value)
            path = save_config(cfg)
            click.echo(f"Saved to {path}", err=True)
    except DifxError as e:
        _fail(str(e))

    _print_config(cfg)


if __name__ == "__main__":
    cli()
