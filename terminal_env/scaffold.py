"""
Project Scaffolding
--------------------------------------------------

Creates starter Python, Node.js and Ruby projects. Called by
`terminal-env new`, which the pyproject/nodeproject/rubyproject shell
functions invoke through the installed template scripts.
"""

import json
import logging
import re
from pathlib import Path
from typing import Callable, Dict, Union

from terminal_env.errors import CommandError, ScaffoldError
from terminal_env.host import Host

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*$")


def validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ScaffoldError("Project name must not be empty")
    if not NAME_PATTERN.match(name):
        raise ScaffoldError(
            f"Invalid project name {name!r}: use letters, digits, '-' and '_', "
            "not starting with '-'"
        )
    return name


def snake_name(name: str) -> str:
    return name.lower().replace("-", "_")


def camel_name(name: str) -> str:
    return "".join(part.capitalize() for part in snake_name(name).split("_") if part)


def _write(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    logger.debug(f"Wrote {path}")
    return path


# ----------------------------------------------------------------
# Python
# ----------------------------------------------------------------
PY_GITIGNORE = """__pycache__/
*.py[cod]
*.egg-info/
build/
dist/
.venv/
venv/
.pytest_cache/
.mypy_cache/
.coverage
htmlcov/
.env
"""


def _python_project(host: Host, root: Path, name: str) -> None:
    module = snake_name(name)
    _write(root, f"{module}/__init__.py", f'"""{name} package."""\n\n__version__ = "0.1.0"\n')
    _write(
        root,
        f"{module}/main.py",
        'def main():\n    print("Hello, world!")\n\n\nif __name__ == "__main__":\n    main()\n',
    )
    _write(root, "tests/__init__.py", "")
    _write(
        root,
        "tests/test_main.py",
        f"from {module}.main import main\n\n\n"
        "def test_main(capsys):\n"
        "    main()\n"
        '    assert capsys.readouterr().out == "Hello, world!\\n"\n',
    )
    _write(
        root,
        "README.md",
        f"# {name}\n\n## Setup\n\n```bash\npython -m venv venv\n"
        "source venv/bin/activate\npip install -e '.[dev]'\n```\n\n"
        "## Tests\n\n```bash\npytest\n```\n",
    )
    _write(
        root,
        "pyproject.toml",
        "[build-system]\n"
        'requires = ["setuptools>=61.0"]\n'
        'build-backend = "setuptools.build_meta"\n\n'
        "[project]\n"
        f'name = "{name}"\n'
        'version = "0.1.0"\n'
        'requires-python = ">=3.8"\n'
        "dependencies = []\n\n"
        "[project.optional-dependencies]\n"
        'dev = ["pytest", "black", "flake8", "mypy"]\n\n'
        "[tool.black]\n"
        "line-length = 88\n\n"
        "[tool.pytest.ini_options]\n"
        'testpaths = ["tests"]\n',
    )
    _write(root, ".gitignore", PY_GITIGNORE)
    try:
        host.run(["python3", "-m", "venv", "venv"], cwd=root)
        logger.info(f"Created virtual environment at {root / 'venv'}")
    except CommandError as e:
        logger.warning(f"Could not create virtual environment: {e}")


# ----------------------------------------------------------------
# Node.js
# ----------------------------------------------------------------
def _node_project(host: Host, root: Path, name: str) -> None:
    package = {
        "name": name.lower(),
        "version": "1.0.0",
        "description": "",
        "main": "src/index.js",
        "scripts": {
            "start": "node src/index.js",
            "test": "jest",
            "lint": "eslint src/**/*.js",
            "format": 'prettier --write "src/**/*.js"',
        },
        "keywords": [],
        "author": "",
        "license": "MIT",
    }
    _write(root, "package.json", json.dumps(package, indent=2) + "\n")
    _write(
        root,
        "src/index.js",
        "function main() {\n  console.log('Hello, world!');\n}\n\n"
        "if (require.main === module) {\n  main();\n}\n\n"
        "module.exports = { main };\n",
    )
    _write(
        root,
        "test/index.test.js",
        "const { main } = require('../src/index');\n\n"
        "describe('main', () => {\n"
        "  it('is a function', () => {\n"
        "    expect(typeof main).toBe('function');\n"
        "  });\n"
        "});\n",
    )
    _write(
        root,
        "README.md",
        f"# {name}\n\n## Setup\n\n```bash\nnpm install\n```\n\n"
        "## Usage\n\n```bash\nnpm start\nnpm test\nnpm run lint\nnpm run format\n```\n",
    )
    _write(root, ".gitignore", "node_modules/\ncoverage/\ndist/\n.env\nnpm-debug.log*\n")
    _write(
        root,
        ".eslintrc.js",
        "module.exports = {\n"
        "  env: { node: true, es2021: true, jest: true },\n"
        "  extends: 'eslint:recommended',\n"
        "  parserOptions: { ecmaVersion: 12 },\n"
        "  rules: {\n"
        "    indent: ['error', 2],\n"
        "    quotes: ['error', 'single'],\n"
        "    semi: ['error', 'always'],\n"
        "  },\n"
        "};\n",
    )
    _write(
        root,
        ".prettierrc",
        json.dumps({"singleQuote": True, "trailingComma": "es5", "tabWidth": 2}, indent=2)
        + "\n",
    )


# ----------------------------------------------------------------
# Ruby
# ----------------------------------------------------------------
def _ruby_project(host: Host, root: Path, name: str) -> None:
    module = snake_name(name)
    const = camel_name(name)
    _write(
        root,
        "Gemfile",
        "source 'https://rubygems.org'\n\n"
        "group :development, :test do\n"
        "  gem 'rspec', '~> 3.10'\n"
        "  gem 'rubocop', '~> 1.20'\n"
        "  gem 'pry', '~> 0.14'\n"
        "end\n",
    )
    _write(root, f"lib/{module}.rb", f"module {const}\n  VERSION = '0.1.0'.freeze\nend\n")
    bin_script = _write(
        root,
        f"bin/{name}",
        "#!/usr/bin/env ruby\n\n"
        f"require_relative '../lib/{module}'\n\n"
        f"puts \"Hello from {name}!\"\n",
    )
    bin_script.chmod(0o755)
    _write(
        root,
        f"spec/{module}_spec.rb",
        f"require '{module}'\n\n"
        f"RSpec.describe {const} do\n"
        "  it 'has a version number' do\n"
        f"    expect({const}::VERSION).not_to be nil\n"
        "  end\n"
        "end\n",
    )
    _write(
        root,
        "spec/spec_helper.rb",
        "$LOAD_PATH.unshift File.expand_path('../lib', __dir__)\n\n"
        "RSpec.configure do |config|\n"
        "  config.disable_monkey_patching!\n"
        "  config.order = :random\n"
        "end\n",
    )
    _write(root, ".rspec", "--require spec_helper\n")
    _write(
        root,
        "Rakefile",
        "require 'rspec/core/rake_task'\n\nRSpec::Core::RakeTask.new(:spec)\n\ntask default: :spec\n",
    )
    _write(
        root,
        "README.md",
        f"# {name}\n\n## Setup\n\n```bash\nbundle install\n```\n\n"
        f"## Usage\n\n```bash\nbin/{name}\nbundle exec rake\n```\n",
    )
    _write(root, ".gitignore", "/.bundle/\n/vendor/\n/coverage/\n/tmp/\nspec/examples.txt\n")


BUILDERS: Dict[str, Callable[[Host, Path, str], None]] = {
    "python": _python_project,
    "node": _node_project,
    "ruby": _ruby_project,
}


def _git_init(host: Host, root: Path) -> None:
    if not host.command_exists("git"):
        logger.warning("git not found; skipping repository initialisation.")
        return
    try:
        host.run(["git", "init"], cwd=root)
        host.run(["git", "add", "."], cwd=root)
    except CommandError as e:
        raise ScaffoldError(f"Failed to initialise git repository: {e}") from e
    try:
        host.run(["git", "commit", "-m", "Initial commit", "--no-verify"], cwd=root)
    except CommandError as e:
        logger.warning(f"Failed to create initial commit: {e}")


def create_project(
    language: str, name: str, parent: Union[str, Path], host: Host
) -> Path:
    """
    Create a new project directory under parent and return its path.

    Raises ScaffoldError for an unknown language, an invalid name or an
    existing target directory.
    """
    if language not in BUILDERS:
        raise ScaffoldError(f"Unsupported project language: {language}")
    name = validate_name(name)
    root = Path(parent) / name
    if root.exists():
        raise ScaffoldError(f"Directory '{name}' already exists.")
    logger.info(f"Creating {language} project: {name}")
    root.mkdir(parents=True)
    BUILDERS[language](host, root, name)
    _git_init(host, root)
    logger.info(f"Project {name} created at {root}")
    return root
