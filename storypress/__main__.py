from storypress.cli import run

run()
