"""Output formatting utilities."""

import json
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from agentflow.wizard.navigation import NavigationController, StepStatus

console = Console()

STATUS_STYLES = {
    StepStatus.COMPLETED: "[green]✓ completed[/green]",
    StepStatus.CURRENT: "[bold blue]▶ current[/bold blue]",
    StepStatus.ACCESSIBLE: "accessible",
    StepStatus.LOCKED: "[dim]locked[/dim]",
}


def format_output(data: Any, format_type: str = "table", columns: Optional[List[str]] = None) -> None:
    """Format and print data based on format type."""
    if format_type == "json":
        print_json(data)
    elif format_type == "yaml":
        print_yaml(data)
    elif isinstance(data, list):
        print_table(data, columns)
    elif isinstance(data, dict):
        print_table([data], columns)
    else:
        console.print(data)


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    json_str = json.dumps(data, indent=2, default=str)
    console.print(Syntax(json_str, "json", theme="monokai", line_numbers=False))


def print_yaml(data: Any) -> None:
    """Print data as formatted YAML."""
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    console.print(Syntax(yaml_str, "yaml", theme="monokai", line_numbers=False))


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, (list, dict)):
        text = ", ".join(str(v) for v in value) if isinstance(value, list) else json.dumps(value)
    else:
        text = str(value)
    if len(text) > 50:
        text = text[:47] + "..."
    return text or "-"


def print_table(
    data: List[Dict[str, Any]],
    columns: Optional[List[str]] = None,
    title: Optional[str] = None,
) -> None:
    """Print data as a formatted table."""
    if not data:
        console.print("[dim]No data to display[/dim]")
        return

    display_columns = columns or list(data[0].keys())
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for col in display_columns:
        table.add_column(col.replace("_", " ").title())

    for item in data:
        table.add_row(*[_cell(item.get(col)) for col in display_columns])

    console.print(table)


def wizard_status(controller: NavigationController) -> Dict[str, Any]:
    """Plain-data view of a wizard for json/yaml output."""
    current = controller.current_step
    return {
        "current_step": current.id if current else None,
        "completed": controller.is_completed,
        "progress": round(controller.progress),
        "completed_steps": sorted(controller.state.completed_step_ids),
        "steps": [
            {
                "id": item.step.id,
                "title": item.step.title,
                "status": item.status.value,
                "missing_fields": item.missing_fields,
            }
            for item in controller.step_statuses()
        ],
    }


def print_wizard_status(controller: NavigationController, format_type: str = "table") -> None:
    """Print progress and the step indicator of a wizard."""
    if format_type != "table":
        format_output(wizard_status(controller), format_type)
        return

    total = len(controller.registry)
    if controller.is_completed:
        console.print(f"[green]✓[/green] Wizard complete ({total} of {total} steps)")
    else:
        position = controller.registry.index_of(controller.state.current_step_id) + 1
        console.print(
            f"Step {position} of {total}  [dim]{round(controller.progress)}% complete[/dim]"
        )

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Step")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Missing Fields")
    for item in controller.step_statuses():
        table.add_row(
            str(item.step.id),
            item.step.title,
            STATUS_STYLES[item.status],
            _cell(item.missing_fields) if item.missing_fields else "-",
        )
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}")
