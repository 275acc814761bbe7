from chatwright.cli import app

app()
