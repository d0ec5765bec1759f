import sys

from devtools_codegen.gen_client import main

sys.exit(main())
