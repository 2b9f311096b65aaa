#! /usr/bin/env python3
"""
Deposit a file and its description into Zenodo, printing the resulting DOI.

Typical uses:

  zenodeposit -c deposit.yml publish -T "Sediment cores" -a "Jane Doe" results.csv
  zenodeposit -c deposit.yml newversion 1234567 -f results-v2.csv

Execute this script with the -h option to display the full list of options.
"""
import sys, os, logging, traceback as tb
from zenodeposit import cli

def report(prog, msg):
    rootlog = logging.getLogger()
    if rootlog.handlers:
        rootlog.error(msg)
    else:
        sys.stderr.write(f"{prog}: {msg}\n")

def run(argv):
    prog = os.path.splitext(os.path.basename(argv[0]))[0] or "zenodeposit"
    try:
        cli.main(prog, argv[1:])
    except cli.Failure as ex:
        report(prog, str(ex))
        return ex.exitcode
    except Exception as ex:
        # unexpected failure
        tb.print_exc()
        report(prog, str(ex))
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(run(sys.argv))
