"""
CLI entry point, when used as a module: `python -m kubecast`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kubecast").
"""
from kubecast import cli

if __name__ == '__main__':
    cli.main()
