"""AgentFlow CLI - Main entry point."""

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import click

from agentflow import __version__
from agentflow.client import AsyncAgentFlowClient
from agentflow.config import Settings, WizardFlow, get_settings
from agentflow.core.logging import configure_logging
from agentflow.exceptions import AgentFlowError, ValidationError
from agentflow.wizard.catalog import registry_for
from agentflow.wizard.navigation import NavigationController
from agentflow.wizard.persistence import HttpPersistenceGateway, PersistenceGateway

from .output import format_output, print_error, print_success, print_wizard_status

WizardAction = Callable[[NavigationController], Awaitable[Any]]


def build_gateway(
    settings: Settings,
    flow: WizardFlow,
    client: AsyncAgentFlowClient,
) -> PersistenceGateway:
    """Gateway used by the commands for a flow."""
    return HttpPersistenceGateway(client, base_path=settings.wizard_path(flow))


def parse_assignment(raw: str) -> Tuple[str, Any]:
    """Parse ``FIELD=VALUE``. Values that are valid JSON are decoded."""
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise click.BadParameter(f"Expected FIELD=VALUE, got '{raw}'")
    try:
        return name.strip(), json.loads(value)
    except ValueError:
        return name.strip(), value


async def _run_wizard(obj: Dict[str, Any], action: Optional[WizardAction]) -> NavigationController:
    settings: Settings = obj["settings"]
    flow: WizardFlow = obj["flow"]

    async with AsyncAgentFlowClient.from_settings(settings) as client:
        controller = NavigationController(registry_for(flow), build_gateway(settings, flow, client))
        await controller.resume()
        if action is not None:
            await action(controller)
        return controller


def _execute(
    ctx: click.Context,
    action: Optional[WizardAction] = None,
    describe: Optional[Callable[[NavigationController], str]] = None,
) -> None:
    """Resume the wizard, run an action, print the outcome."""
    try:
        controller = asyncio.run(_run_wizard(ctx.obj, action))
    except ValidationError as e:
        print_error(f"Step {e.step_id} is incomplete. Missing: {', '.join(e.missing_fields)}")
        sys.exit(1)
    except AgentFlowError as e:
        print_error(str(e))
        sys.exit(1)

    if describe is not None:
        print_success(describe(controller))
    print_wizard_status(controller, ctx.obj["output"])


def _describe_position(controller: NavigationController) -> str:
    if controller.is_completed:
        return "Wizard completed"
    step = controller.current_step
    return f"Now on step {step.id}: {step.title}"


@click.group()
@click.version_option(version=__version__, prog_name="agentflow")
@click.option("--api-key", help="API key for authentication")
@click.option("--base-url", help="API base URL")
@click.option("--organization", "organization_id", help="Organization ID for multi-tenant requests")
@click.option("--flow", "-f", type=click.Choice([f.value for f in WizardFlow]), default=WizardFlow.ONBOARDING.value,
              help="Guided flow to operate on")
@click.option("--output", "-o", type=click.Choice(["table", "json", "yaml"]), default="table",
              help="Output format")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    api_key: Optional[str],
    base_url: Optional[str],
    organization_id: Optional[str],
    flow: str,
    output: str,
    debug: bool,
):
    """AgentFlow CLI - Drive onboarding and agent-creation wizards.

    \b
    Examples:
      agentflow status
      agentflow set companyName=Acme industry=Technology
      agentflow next
      agentflow --flow agent jump 1
    """
    settings = get_settings()
    overrides = {
        "api_key": api_key,
        "api_base_url": base_url,
        "organization_id": organization_id,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging("debug" if debug else settings.log_level, settings.log_format)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["flow"] = WizardFlow(flow)
    ctx.obj["output"] = output


@cli.command("steps")
@click.pass_context
def list_steps(ctx: click.Context):
    """List the steps of the selected flow."""
    registry = registry_for(ctx.obj["flow"])
    format_output(
        [step.to_dict() for step in registry],
        ctx.obj["output"],
        columns=["id", "title", "required_fields", "description"],
    )


@cli.command("status")
@click.pass_context
def status(ctx: click.Context):
    """Show progress of the selected flow."""
    _execute(ctx)


@cli.command("set")
@click.argument("assignments", nargs=-1, required=True)
@click.pass_context
def set_fields(ctx: click.Context, assignments: Tuple[str, ...]):
    """Set fields of the current step and save progress.

    \b
    Examples:
      agentflow set companyName=Acme
      agentflow set 'platforms=["whatsapp", "telegram"]'
    """
    values = dict(parse_assignment(raw) for raw in assignments)

    async def action(controller: NavigationController) -> None:
        step = controller.current_step
        foreign = sorted(name for name in values if name not in step.fields)
        if foreign:
            raise click.BadParameter(
                f"Not collected on step {step.id} ({step.title}): {', '.join(foreign)}",
                param_hint="ASSIGNMENTS",
            )
        controller.state.update_fields(values)
        await controller.save_progress()

    _execute(ctx, action, lambda _: f"Saved {len(values)} field(s)")


@cli.command("next")
@click.pass_context
def next_step(ctx: click.Context):
    """Complete the current step and advance."""
    _execute(ctx, lambda controller: controller.next(), _describe_position)


@cli.command("prev")
@click.pass_context
def prev_step(ctx: click.Context):
    """Go back one step."""
    _execute(ctx, lambda controller: controller.prev(), _describe_position)


@cli.command("jump")
@click.argument("step_id", type=int)
@click.pass_context
def jump(ctx: click.Context, step_id: int):
    """Go to a completed or earlier step."""
    _execute(ctx, lambda controller: controller.jump_to(step_id), _describe_position)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
