"""Entry point for CLI execution as a module."""

if __name__ == "__main__":
    from mcp_runtime.cli.main import main

    main()
