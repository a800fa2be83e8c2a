import sys

from xml_bracket.cli.main import main

sys.exit(main())
