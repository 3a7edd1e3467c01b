from invoke import task
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.absolute()

TEST_SETTINGS = "bracketeer.test_settings"


def project_relative(path):
    """Convert a relative path to an absolute path relative to the project root."""
    return str(PROJECT_ROOT / path)


def manage(c, command, settings=None):
    manage_py = project_relative("manage.py")
    suffix = f" --settings={settings}" if settings else ""
    c.run(f"python {manage_py} {command}{suffix}")


@task
def update(c):
    """Update all dependencies to their latest versions using poetry."""
    c.run("poetry update")


@task
def up(c):
    """Alias for update - update all dependencies to their latest versions."""
    update(c)


@task
def runserver(c):
    """Run the Django development server on 0.0.0.0:8000."""
    manage(c, "runserver 0.0.0.0:8000")


@task
def migrate(c):
    """Run Django database migrations."""
    manage(c, "migrate")


@task
def makemigrations(c):
    """Create new Django migrations."""
    manage(c, "makemigrations tournament")


@task
def shell(c):
    """Start Django shell."""
    manage(c, "shell")


@task
def test(c, path=None):
    """Run Django tests. Optionally specify a specific test path."""
    manage(c, f"test {path}" if path else "test", settings=TEST_SETTINGS)


@task
def pytest(c, path=None):
    """Run the test suite with pytest."""
    c.run(f"pytest {path}" if path else "pytest")


@task
def seed(c, bracket_type="SINGLE_ELIMINATION", teams=8, start=True):
    """Seed a tournament with generated teams, started unless --no-start is given."""
    start_flag = " --start" if start else ""
    manage(c, f"seed_bracket_tournament --bracket-type {bracket_type} --teams {teams}{start_flag}")


@task
def simulate(c, tournament_id, seed=None):
    """Report random results for a tournament until it completes."""
    seed_flag = f" --seed {seed}" if seed is not None else ""
    manage(c, f"simulate_results {tournament_id}{seed_flag}")
