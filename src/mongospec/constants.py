"""
Wire-level constants for mongospec.

Every operator key the compilers emit is defined here once, so the rest of the
package never spells out a "$"-prefixed string by hand.
"""

OPERATOR_PREFIX = "$"


def _op(name: str) -> str:
    return f"{OPERATOR_PREFIX}{name}"


# =============================================================================
# QUERY OPERATORS
# =============================================================================

EQ = _op("eq")
NE = _op("ne")
GT = _op("gt")
GTE = _op("gte")
LT = _op("lt")
LTE = _op("lte")
IN = _op("in")
NIN = _op("nin")
EXISTS = _op("exists")
REGEX = _op("regex")
OPTIONS = _op("options")  # Modifier for $regex
ALL = _op("all")
SIZE = _op("size")
ELEM_MATCH = _op("elemMatch")
NOT = _op("not")

AND = _op("and")
OR = _op("or")
NOR = _op("nor")

# =============================================================================
# UPDATE OPERATORS
# =============================================================================

SET = _op("set")
INC = _op("inc")
MUL = _op("mul")
MIN = _op("min")
MAX = _op("max")
PUSH = _op("push")
PULL = _op("pull")
ADD_TO_SET = _op("addToSet")
POP = _op("pop")
UNSET = _op("unset")
RENAME = _op("rename")

# $pop takes -1 to remove the first element, 1 to remove the last
POP_FIRST = -1
POP_LAST = 1

# MongoDB ignores the value given to $unset; "" is the conventional one
UNSET_VALUE = ""

# =============================================================================
# AGGREGATION STAGES
# =============================================================================

MATCH = _op("match")
PROJECT = _op("project")
GROUP = _op("group")
SORT = _op("sort")
LIMIT = _op("limit")
SKIP = _op("skip")
UNWIND = _op("unwind")
LOOKUP = _op("lookup")
ADD_FIELDS = _op("addFields")
SET_STAGE = SET  # $set is an alias of $addFields inside a pipeline
UNSET_STAGE = UNSET
REPLACE_ROOT = _op("replaceRoot")
COUNT = _op("count")
FACET = _op("facet")
BUCKET = _op("bucket")
SAMPLE = _op("sample")
OUT = _op("out")
MERGE = _op("merge")

# =============================================================================
# ACCUMULATORS
# =============================================================================
# $min, $max, $push and $addToSet share their key with the update operators.

SUM = _op("sum")
AVG = _op("avg")
FIRST = _op("first")
LAST = _op("last")

GROUP_ID = "_id"
