from usekit.main import run

run()
