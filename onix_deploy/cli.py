"""Command line entry point: preview a deployment plan without touching AWS."""

import typer

from onix_deploy.config import load_settings
from onix_deploy.exceptions.deployment_exceptions import DeploymentError
from onix_deploy.logging_config import configure_logging, get_logger
from onix_deploy.provisioners.dry_run import DryRunProvisioner
from onix_deploy.schemas.plan import DeploymentTarget, ServiceMode
from onix_deploy.services.planner import DeploymentPlanner, build_plan

app = typer.Typer(help="Plan Beckn-ONIX deployments on AWS.", no_args_is_help=True)
logger = get_logger(__name__)


@app.command("plan")
def plan_command(
    target: str = typer.Argument(..., help="sandbox, registry, gateway, bap or bpp"),
    mode: str = typer.Option(
        "common", "--mode", "-m", help="common (self-hosted charts) or managed (AWS services)"
    ),
) -> None:
    """Dry-run a deployment and print its steps and outputs."""
    try:
        settings = load_settings()
        configure_logging(settings)
        planner = DeploymentPlanner(settings, DryRunProvisioner(settings))
        result = planner.run(target, mode)
    except DeploymentError as exc:
        logger.error("deployment_plan_rejected", error=exc.message)
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Deployment plan for {result.plan.target.value} ({result.plan.mode.value}):")
    for index, step in enumerate(result.plan.steps, start=1):
        typer.echo(f"  {index}. {step.stack_id:<30} {step.describe()}")
    if result.outputs:
        typer.echo("Outputs:")
        for output in result.outputs:
            typer.echo(f"  {output.stack_id}.{output.key} = {output.value}")


@app.command("targets")
def targets_command() -> None:
    """List deployment targets and the components each one builds."""
    for target in DeploymentTarget:
        for mode in ServiceMode:
            plan = build_plan(target, mode)
            components = ", ".join(step.describe() for step in plan.steps)
            typer.echo(f"{target.value:<9} {mode.value:<8} {components}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
