# src/costoptimizer/cli.py
"""Command line entry point for the cost optimizer."""

import asyncio
import json
from pathlib import Path
import click
import structlog

from costoptimizer.clients.kubernetes import KubernetesClientFactory
from costoptimizer.config.settings import Settings
from costoptimizer.core.exceptions import ClientConnectionException, ConfigurationException
from costoptimizer.core.utils import setup_logging
from costoptimizer.engine.analysis import AnalysisResult
from costoptimizer.engine.optimizer import CostOptimizer

logger = structlog.get_logger(__name__)


def _load_settings(debug: bool) -> Settings:
    settings = Settings.create_from_env()
    if debug:
        settings.debug = True
        settings.log_level = "DEBUG"
    log_level = settings.log_level.value if hasattr(settings.log_level, "value") else settings.log_level
    setup_logging(log_level=log_level, log_format=settings.log_format)
    return settings


async def _build_optimizer(settings: Settings) -> CostOptimizer:
    config = {
        "kubernetes": settings.kubernetes.model_dump(),
        "pricing": settings.pricing.model_dump(),
        "scheduler": settings.scheduler.model_dump(),
    }
    factory = KubernetesClientFactory(config["kubernetes"], config["scheduler"])
    k8s_client = await factory.create_connected_client()
    return CostOptimizer(k8s_client, k8s_client, config)


def result_to_dict(result: AnalysisResult) -> dict:
    return {
        "generated_at": result.generated_at.isoformat(),
        "unavailable": list(result.unavailable),
        "summary": result.summary.model_dump(mode="json"),
        "recommendations": [r.model_dump(mode="json") for r in result.recommendations],
        "node_metrics": [n.model_dump(mode="json") for n in result.node_metrics],
        "pod_metrics": [p.model_dump(mode="json") for p in result.pod_metrics],
    }


@click.group()
def cli():
    """Kubernetes cost attribution and optimization recommendations."""


@cli.command()
@click.option('--output', '-o', default=None, help='Write the JSON result to this file instead of stdout')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def analyze(output, debug):
    """Run a single analysis cycle and print the result as JSON."""
    
    async def run_analysis():
        settings = _load_settings(debug)
        optimizer = await _build_optimizer(settings)
        result = await optimizer.refresh()
        document = json.dumps(result_to_dict(result), indent=2, default=str)
        
        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(document)
            summary = result.summary
            click.echo(f"Result saved to: {output_path}")
            click.echo(f"Monthly cost: ${summary.total_monthly_cost:.2f} "
                       f"(compute ${summary.compute_cost:.2f}, storage ${summary.storage_cost:.2f})")
            click.echo(f"Recommendations: {summary.recommendation_count}, "
                       f"potential savings: ${summary.potential_savings:.2f}")
        else:
            click.echo(document)
    
    try:
        asyncio.run(run_analysis())
    except (ClientConnectionException, ConfigurationException) as e:
        raise click.ClickException(e.message)


@cli.command()
@click.option('--interval', type=float, default=None, help='Seconds between analysis cycles')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def run(interval, debug):
    """Refresh continuously, logging a cost summary after each cycle."""
    
    async def run_forever():
        settings = _load_settings(debug)
        if interval:
            settings.scheduler.interval_seconds = interval
        optimizer = await _build_optimizer(settings)
        
        last_cycle = 0
        async with optimizer:
            while True:
                await asyncio.sleep(1)
                result = optimizer.get_result()
                if result.cycle == last_cycle:
                    continue
                last_cycle = result.cycle
                summary = result.summary
                logger.info(
                    "Cost summary",
                    cycle=result.cycle,
                    total_monthly_cost=round(summary.total_monthly_cost, 2),
                    wasted_resources=round(summary.wasted_resources, 2),
                    potential_savings=round(summary.potential_savings, 2),
                    recommendations=summary.recommendation_count,
                    nodes=summary.node_count,
                    pods=summary.pod_count
                )
    
    try:
        asyncio.run(run_forever())
    except KeyboardInterrupt:
        click.echo("Stopped")
    except (ClientConnectionException, ConfigurationException) as e:
        raise click.ClickException(e.message)


if __name__ == '__main__':
    cli()
