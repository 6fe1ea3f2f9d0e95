from alerts_handler.main import cli

cli(prog_name="alerts-handler")
