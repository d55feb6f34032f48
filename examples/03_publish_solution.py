#!/usr/bin/env python
"""Send the sample solution to `mtc-pour execute --listen` running locally."""

import os
import sys

from mtc_pour.client import SolutionPublisherClient
from mtc_pour.io.solution import load_solution

HERE = os.path.abspath(os.path.dirname(__file__))


def main():
    solution = load_solution(os.path.join(HERE, "solutions", "pour_solution.json"))
    with SolutionPublisherClient("localhost", 8010) as client:
        if not client.connected:
            return 1
        response = client.publish_solution("/execute_first_solution/solution", solution)
        print(response)
    return 0 if response and response.get("status") == "ok" else 1


if __name__ == "__main__":
    sys.exit(main())
