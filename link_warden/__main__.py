from link_warden.cli import cli

cli()
