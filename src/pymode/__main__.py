from pymode.cli import run

run()
