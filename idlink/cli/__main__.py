from idlink.cli.main import app

app()
