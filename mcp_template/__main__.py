"""Allow ``python -m mcp_template``."""

from mcp_template.main import main

if __name__ == "__main__":
    main()
