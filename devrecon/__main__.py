"""CLI entry point: python -m devrecon"""

from devrecon.cli import main

main(prog_name="devrecon")
