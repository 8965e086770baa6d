"""
CLI entry point, when used as a module: `python -m kubewait`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kubewait").
"""
from kubewait import cli

if __name__ == '__main__':
    cli.main()
