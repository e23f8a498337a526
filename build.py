#!/usr/bin/env python3
from devblog.cli import main

if __name__ == "__main__":
    main()
