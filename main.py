"""trace-waterfall — render HTTP client trace logs as a request waterfall."""

import sys

from trace_waterfall.main import main

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
    except BrokenPipeError:
        sys.exit(0)
