# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import sys

from etalint.etalint import main

sys.exit(main())
