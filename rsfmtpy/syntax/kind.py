"""Unified syntax kinds for parser and CST."""

from enum import IntEnum

from rsfmtpy.lexer import TokenKind


class RustSyntaxKind(IntEnum):
    """Language syntax vocabulary (tokens + nodes).

    Token kinds share their values with `TokenKind` so the parser converts
    by value; node kinds start at ROOT.
    """

    TOMBSTONE = 0
    EOF = 1

    # Trivia tokens
    WHITESPACE = 10
    NEWLINE = 11
    COMMENT = 12
    SKIPPED = 13

    # Lexical tokens
    IDENT = 20
    LIFETIME = 21
    STRING = 22
    CHAR = 23
    INT = 24
    FLOAT = 25

    EQUAL = 30
    EQUAL_EQUAL = 31
    NOT_EQUAL = 32
    LESS_THAN_OR_EQUAL = 33
    LESS_THAN = 35
    GREATER_THAN = 36
    FAT_ARROW = 37
    THIN_ARROW = 38
    AMP_AMP = 39
    PIPE_PIPE = 40
    PLUS_EQUAL = 42
    MINUS_EQUAL = 43
    STAR_EQUAL = 44
    SLASH_EQUAL = 45
    PERCENT_EQUAL = 46
    CARET_EQUAL = 47
    AMP_EQUAL = 48
    PIPE_EQUAL = 49
    DOT_DOT = 51
    DOT_DOT_EQUAL = 52
    DOT_DOT_DOT = 53
    COLON_COLON = 54

    COLON = 60
    SEMICOLON = 61
    COMMA = 62
    DOT = 63
    SLASH = 64
    AT = 65
    POUND = 66
    DOLLAR = 67
    TILDE = 68

    PLUS = 70
    MINUS = 71
    STAR = 72
    PERCENT = 73
    CARET = 74
    PIPE = 75
    AMP = 76
    QUESTION = 77
    BANG = 78

    LBRACE = 80
    RBRACE = 81
    LBRACKET = 82
    RBRACKET = 83
    LPAREN = 84
    RPAREN = 85

    # Node kinds
    ROOT = 1000
    ERROR = 1001
    SOURCE_FILE = 1002
    TOKEN_TREE = 1003

    # Items
    ATTRIBUTE = 1100
    VISIBILITY = 1101
    USE_ITEM = 1102
    USE_TREE = 1103
    USE_TREE_LIST = 1104
    STRUCT_ITEM = 1105
    ENUM_ITEM = 1106
    UNION_ITEM = 1107
    RECORD_FIELD_LIST = 1108
    RECORD_FIELD = 1109
    TUPLE_FIELD_LIST = 1110
    TUPLE_FIELD = 1111
    VARIANT_LIST = 1112
    VARIANT = 1113
    FN_ITEM = 1114
    PARAM_LIST = 1115
    PARAM = 1116
    SELF_PARAM = 1117
    RET_TYPE = 1118
    IMPL_ITEM = 1119
    TRAIT_ITEM = 1120
    ASSOC_ITEM_LIST = 1121
    MOD_ITEM = 1122
    ITEM_LIST = 1123
    CONST_ITEM = 1124
    STATIC_ITEM = 1125
    TYPE_ALIAS = 1126
    EXTERN_CRATE = 1127
    EXTERN_BLOCK = 1128
    MACRO_CALL = 1129
    MACRO_RULES = 1130
    GENERIC_PARAM_LIST = 1131
    TYPE_PARAM = 1132
    LIFETIME_PARAM = 1133
    CONST_PARAM = 1134
    WHERE_CLAUSE = 1135
    WHERE_PRED = 1136
    TYPE_BOUND_LIST = 1137
    TYPE_BOUND = 1138
    GENERIC_ARG_LIST = 1139
    ASSOC_TYPE_ARG = 1140
    DISCRIMINANT = 1141
    ABI = 1142

    # Paths and types
    PATH = 1200
    PATH_SEGMENT = 1201
    QUALIFIED_SELF = 1202
    PATH_TYPE = 1203
    REF_TYPE = 1204
    PTR_TYPE = 1205
    TUPLE_TYPE = 1206
    ARRAY_TYPE = 1207
    SLICE_TYPE = 1208
    FN_PTR_TYPE = 1209
    IMPL_TRAIT_TYPE = 1210
    DYN_TRAIT_TYPE = 1211
    NEVER_TYPE = 1212
    INFER_TYPE = 1213
    PAREN_TYPE = 1214
    FOR_BINDER = 1215

    # Patterns
    IDENT_PAT = 1300
    WILDCARD_PAT = 1301
    REST_PAT = 1302
    LITERAL_PAT = 1303
    RANGE_PAT = 1304
    REF_PAT = 1305
    TUPLE_PAT = 1306
    SLICE_PAT = 1307
    TUPLE_STRUCT_PAT = 1308
    RECORD_PAT = 1309
    RECORD_PAT_FIELD = 1310
    PATH_PAT = 1311
    OR_PAT = 1312

    # Statements
    BLOCK = 1400
    LET_STMT = 1401
    LET_ELSE = 1402
    EXPR_STMT = 1403
    EMPTY_STMT = 1404

    # Expressions
    LITERAL = 1500
    PATH_EXPR = 1501
    CALL_EXPR = 1502
    ARG_LIST = 1503
    METHOD_CALL_EXPR = 1504
    FIELD_EXPR = 1505
    INDEX_EXPR = 1506
    TRY_EXPR = 1507
    AWAIT_EXPR = 1508
    PREFIX_EXPR = 1509
    REF_EXPR = 1510
    BIN_EXPR = 1511
    CAST_EXPR = 1512
    RANGE_EXPR = 1513
    BLOCK_EXPR = 1514
    IF_EXPR = 1515
    LET_EXPR = 1516
    MATCH_EXPR = 1517
    MATCH_ARM_LIST = 1518
    MATCH_ARM = 1519
    MATCH_GUARD = 1520
    WHILE_EXPR = 1521
    LOOP_EXPR = 1522
    FOR_EXPR = 1523
    CLOSURE_EXPR = 1524
    CLOSURE_PARAM_LIST = 1525
    RETURN_EXPR = 1526
    BREAK_EXPR = 1527
    CONTINUE_EXPR = 1528
    RECORD_EXPR = 1529
    RECORD_EXPR_FIELD_LIST = 1530
    RECORD_EXPR_FIELD = 1531
    TUPLE_EXPR = 1532
    ARRAY_EXPR = 1533
    PAREN_EXPR = 1534
    LABEL = 1535
    UNDERSCORE_EXPR = 1536

    @property
    def is_trivia(self) -> bool:
        return self in (
            RustSyntaxKind.WHITESPACE,
            RustSyntaxKind.NEWLINE,
            RustSyntaxKind.COMMENT,
            RustSyntaxKind.SKIPPED,
        )

    @staticmethod
    def from_token_kind(kind: TokenKind) -> "RustSyntaxKind":
        return RustSyntaxKind(kind.value)


ITEM_KINDS: frozenset[RustSyntaxKind] = frozenset(
    {
        RustSyntaxKind.USE_ITEM,
        RustSyntaxKind.STRUCT_ITEM,
        RustSyntaxKind.ENUM_ITEM,
        RustSyntaxKind.UNION_ITEM,
        RustSyntaxKind.FN_ITEM,
        RustSyntaxKind.IMPL_ITEM,
        RustSyntaxKind.TRAIT_ITEM,
        RustSyntaxKind.MOD_ITEM,
        RustSyntaxKind.CONST_ITEM,
        RustSyntaxKind.STATIC_ITEM,
        RustSyntaxKind.TYPE_ALIAS,
        RustSyntaxKind.EXTERN_CRATE,
        RustSyntaxKind.EXTERN_BLOCK,
        RustSyntaxKind.MACRO_CALL,
        RustSyntaxKind.MACRO_RULES,
    }
)

TYPE_KINDS: frozenset[RustSyntaxKind] = frozenset(
    {
        RustSyntaxKind.PATH_TYPE,
        RustSyntaxKind.REF_TYPE,
        RustSyntaxKind.PTR_TYPE,
        RustSyntaxKind.TUPLE_TYPE,
        RustSyntaxKind.ARRAY_TYPE,
        RustSyntaxKind.SLICE_TYPE,
        RustSyntaxKind.FN_PTR_TYPE,
        RustSyntaxKind.IMPL_TRAIT_TYPE,
        RustSyntaxKind.DYN_TRAIT_TYPE,
        RustSyntaxKind.NEVER_TYPE,
        RustSyntaxKind.INFER_TYPE,
        RustSyntaxKind.PAREN_TYPE,
        RustSyntaxKind.MACRO_CALL,
    }
)

PATTERN_KINDS: frozenset[RustSyntaxKind] = frozenset(
    {
        RustSyntaxKind.IDENT_PAT,
        RustSyntaxKind.WILDCARD_PAT,
        RustSyntaxKind.REST_PAT,
        RustSyntaxKind.LITERAL_PAT,
        RustSyntaxKind.RANGE_PAT,
        RustSyntaxKind.REF_PAT,
        RustSyntaxKind.TUPLE_PAT,
        RustSyntaxKind.SLICE_PAT,
        RustSyntaxKind.TUPLE_STRUCT_PAT,
        RustSyntaxKind.RECORD_PAT,
        RustSyntaxKind.PATH_PAT,
        RustSyntaxKind.OR_PAT,
        RustSyntaxKind.MACRO_CALL,
    }
)
