from dodgem.cli import run

run()
