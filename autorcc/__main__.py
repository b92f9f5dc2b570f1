from autorcc.cli import app

app(prog_name="autorcc")
