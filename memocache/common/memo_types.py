'''Types used by memocache, used by mypy

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.
'''

from typing import Any, Dict, Hashable, Tuple

ArgsTuple = Tuple[Any, ...]
KwargsDict = Dict[str, Any]
DerivedKey = Hashable
YamlDict = Dict[str, Any]
