"""Main CLI entry point"""

from ctxgrep.cli.search import search_command


def main():
    """Entry point for the CLI"""
    search_command()


if __name__ == '__main__':
    main()
