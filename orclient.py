#!/usr/bin/env python3
"""
orclient - live test harness for the OpenRouter client.

Commands:
    orclient chat <prompt>        One chat completion
    orclient stream <prompt>      Streamed chat completion
    orclient complete <prompt>    Legacy completion
    orclient models               List models
    orclient providers            List providers
    orclient credits              Account credits
    orclient activity             Usage by model endpoint
    orclient key                  Current API key
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from cli import main

if __name__ == '__main__':
    main()
