from strategy_dashboard.cli import cli

cli()
