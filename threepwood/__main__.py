# threepwood/__main__.py
from threepwood.cli import cli

cli(prog_name="threepwood")
