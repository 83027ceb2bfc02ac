## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import functools

import lark
from .errors import PrayogSyntaxError


GRAMMAR = r"""start: statement*

?statement: expr ";"                                            -> expr_stmt
          | "echo" expr ("," expr)* ";"                         -> echo_stmt
          | "print" expr ";"                                    -> print_stmt
          | "if" "(" expr ")" block elseif_clause* else_clause? -> if_stmt
          | "while" "(" expr ")" block                          -> while_stmt
          | "do" block "while" "(" expr ")" ";"                 -> do_while_stmt
          | "for" "(" for_part ";" for_part ";" for_part ")" block -> for_stmt
          | "foreach" "(" expr "as" foreach_target ")" block    -> foreach_stmt
          | function_decl
          | class_decl
          | "return" expr? ";"                                  -> return_stmt
          | "break" ";"                                         -> break_stmt
          | "continue" ";"                                      -> continue_stmt
          | "unset" "(" expr ("," expr)* ")" ";"                -> unset_stmt
          | "namespace" qualified_name ";"                      -> namespace_stmt
          | "use" qualified_name ("as" NAME)? ";"               -> use_stmt
          | "throw" expr ";"                                    -> throw_stmt
          | "try" block catch_clause* finally_clause?           -> try_stmt
          | ";"                                                 -> empty_stmt

block: "{" statement* "}"
elseif_clause: ("elseif" | "else" "if") "(" expr ")" block
else_clause: "else" block
for_part: (expr ("," expr)*)?
foreach_target: VARIABLE ("=>" VARIABLE)?
catch_clause: "catch" "(" qualified_name ("|" qualified_name)* VARIABLE? ")" block
finally_clause: "finally" block
qualified_name: "\\"? NAME ("\\" NAME)*

function_decl: "function" NAME "(" params ")" return_type? block
params: (param ("," param)* ","?)?
param: type_hint? VARIABLE ("=" expr)?
type_hint: "?"? (NAME | "array")
return_type: ":" type_hint
closure_uses: "use" "(" VARIABLE ("," VARIABLE)* ")"

class_decl: "class" NAME ("extends" qualified_name)? "{" class_member* "}"
?class_member: modifiers? "function" NAME "(" params ")" return_type? block -> method_decl
             | modifiers? "const" NAME "=" expr ";"                            -> const_decl
             | modifiers type_hint? VARIABLE ("=" expr)? ";"                  -> property_decl
modifiers: ("public" | "private" | "protected" | "static" | "readonly" | "var")+

?expr: assignment

?assignment: conditional
           | postfix ASSIGN assignment                          -> assign
           | postfix COMPOUND_ASSIGN assignment                 -> compound_assign
           | "fn" "(" params ")" return_type? "=>" assignment   -> arrow_fn

?conditional: coalesce
            | coalesce "?" assignment ":" conditional           -> ternary
            | coalesce "?:" conditional                         -> short_ternary

?coalesce: or_expr
         | or_expr "??" coalesce                                -> null_coalesce

?or_expr: and_expr
        | or_expr "||" and_expr                                 -> logical_or

?and_expr: equality
         | and_expr "&&" equality                               -> logical_and

?equality: comparison
         | equality EQ_OP comparison                            -> binop

?comparison: concat
           | comparison CMP_OP concat                           -> binop

?concat: additive
       | concat DOT additive                                    -> binop

?additive: multiplicative
         | additive ADD_OP multiplicative                       -> binop

?multiplicative: instanceof
               | multiplicative MUL_OP instanceof               -> binop

?instanceof: unary
           | unary "instanceof" qualified_name                  -> instanceof_expr

?unary: power
      | "!" unary                                               -> logical_not
      | ADD_OP unary                                            -> unary_op
      | CAST unary                                              -> cast
      | INC postfix                                             -> pre_inc
      | DEC postfix                                             -> pre_dec
      | "@" unary                                               -> silence

?power: postfix
      | postfix POW unary                                       -> binop

?postfix: primary
        | postfix "[" expr? "]"                                 -> index
        | postfix "->" NAME                                     -> prop
        | postfix "->" NAME "(" args ")"                        -> method_call
        | postfix INC                                           -> post_inc
        | postfix DEC                                           -> post_dec

?primary: VARIABLE                                              -> var
        | VARIABLE "(" args ")"                                 -> var_call
        | INT                                                   -> int_lit
        | FLOAT                                                 -> float_lit
        | DQ_STRING                                             -> dq_string
        | SQ_STRING                                             -> sq_string
        | qualified_name                                        -> constant
        | qualified_name "(" args ")"                           -> call
        | qualified_name "::" NAME "(" args ")"                 -> static_call
        | qualified_name "::" NAME                              -> class_const
        | "(" expr ")"
        | "[" array_items "]"                                   -> array_lit
        | "array" "(" array_items ")"                           -> array_lit
        | "new" qualified_name ("(" args ")")?                  -> new_expr
        | "isset" "(" expr ("," expr)* ")"                      -> isset_expr
        | "empty" "(" expr ")"                                  -> empty_expr
        | "function" "(" params ")" closure_uses? return_type? block -> closure

args: (expr ("," expr)* ","?)?
array_items: (array_item ("," array_item)* ","?)?
?array_item: expr
           | expr "=>" expr                                     -> pair

// TOKENS
VARIABLE: /\$[A-Za-z_][A-Za-z0-9_]*/
NAME: /[A-Za-z_][A-Za-z0-9_]*/
FLOAT.2: /\d+\.\d+(?:[eE][+-]?\d+)?|\d+[eE][+-]?\d+/
INT: /0[xX][0-9a-fA-F]+|0[bB][01]+|\d+/
DQ_STRING: /"(?:[^"\\]|\\.)*"/s
SQ_STRING: /'(?:[^'\\]|\\.)*'/s
CAST.3: /\(\s*(?:int|integer|float|double|string|bool|boolean|array)\s*\)/i
ASSIGN: "="
COMPOUND_ASSIGN: "**=" | "??=" | "+=" | "-=" | "*=" | "/=" | ".=" | "%="
EQ_OP: "===" | "!==" | "==" | "!="
CMP_OP: "<=>" | "<=" | ">=" | "<" | ">"
ADD_OP: "+" | "-"
MUL_OP: "*" | "/" | "%"
POW: "**"
DOT: "."
INC: "++"
DEC: "--"

// COMMENTS
COMMENT: /\/\/[^\n]*|#[^\n]*/
BLOCK_COMMENT: /\/\*(.|\n)*?\*\//

// WHITESPACE
%import common.WS
%ignore WS
%ignore COMMENT
%ignore BLOCK_COMMENT
"""


_OPEN_TAG_RE = re.compile(r'^\s*<\?php\b', re.IGNORECASE)
_CLOSE_TAG_RE = re.compile(r'\?>\s*$')


@functools.cache
def _get_parser() -> lark.Lark:
    return lark.Lark(GRAMMAR, start='start', parser='lalr', lexer='contextual', propagate_positions=True)


def strip_open_tag(source: str) -> str:
    return _CLOSE_TAG_RE.sub('', _OPEN_TAG_RE.sub('', source, count=1), count=1)


def parse(source: str, filename=None) -> lark.Tree:
    """Parse one unit of source into a `start` tree whose children are statements."""
    try:
        return _get_parser().parse(strip_open_tag(source))
    except lark.exceptions.UnexpectedInput as exc:
        def attr(k): return getattr(exc, k, None)
        if isinstance(exc, lark.exceptions.UnexpectedCharacters):
            token_val, detail = exc.char, f'unexpected character "{exc.char}"'
        elif (token := attr('token')) is None or token.type == '$END':
            token_val, detail = '', 'unexpected end of file'
        else:
            token_val, detail = token.value, f'unexpected token "{token.value}"'
        line, column = attr('line'), attr('column')
        where = f" on line {line}" if isinstance(line, int) and line > 0 else ""
        raise PrayogSyntaxError(f"syntax error, {detail}{where}", filename=filename,
                                line=line, column=column, token=token_val) from None


def format_parse_error_context(filename, line, column, token_value, source=None):
    lines = source.splitlines(keepends=True) if source else open(filename, 'r').readlines()
    if not isinstance(line, int) or line < 1: line = len(lines)
    start_line, end_line = max(0, line - 3), min(len(lines), line + 2)
    result = [f"\033[97m  File \"{filename}\", line {line}\033[0m"]

    for i in range(start_line, end_line):
        line_content = lines[i].rstrip('\n')
        line_color = '\033[90m'
        if i+1 == line:
            line_color = '\033[97m'
            if column and 0 < column <= len(line_content):
                width = max(1, len(token_value or ''))
                line_content = (
                    line_content[:column-1] +
                    f"\033[48;5;30m\033[1;97m{line_content[column-1:column+width-1]}\033[0m" +
                    line_content[column+width-1:]
                )
        result.append(f"{line_color}{i+1:>5} |\033[0m {line_content}")
    return '\n' + '\n'.join(result) + '\n'
