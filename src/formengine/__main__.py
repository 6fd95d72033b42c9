from formengine.cli import cli

cli()
