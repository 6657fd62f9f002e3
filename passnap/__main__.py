import signal
import sys
from .cli import build_parser

"""
passnap — one-way snapshot of a LastPass vault into a local password store:
- `lpass` CLI as the source
- pass, gopass, or a native Fernet-encrypted directory as the target
- a single git commit per run, no writes for unchanged entries
Usage examples:
    python -m passnap --verbose
    python -m passnap --backup --backup-dir ~/backups --username me@example.com
    python -m passnap --test --debug
    python -m passnap --backend fernet --store-dir ~/.passnap/store
"""


def _terminate(signum, frame):
    # unwinds through every `with` block so cleanup still runs
    raise SystemExit(128 + signum)


def main():
    signal.signal(signal.SIGTERM, _terminate)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, _terminate)
    parser = build_parser()
    args = parser.parse_args()
    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nAborted by user.")
        sys.exit(1)

if __name__ == "__main__":
    main()
