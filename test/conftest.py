import sys
import os

sys.path.insert(1, os.path.join(os.path.dirname(__file__), ".."))

from fixtures.general import conn, config, cache_path
from fixtures.chain import chain_mock
from fixtures.records import transfers_repo, cursors_repo, registry, engine
