from cmdpalette.main import run

run()
