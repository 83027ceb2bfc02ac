## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import sys
from typing import Any
from dataclasses import dataclass

import lark

from .types import Parameter, FunctionDef, ScriptClass, ScriptObject, Closure
from .errors import (PrayogError, PrayogRuntimeError, PrayogNameError, PrayogTypeError,
                     PrayogArgumentCountError, PrayogThrown)
from .library import Library
from .parser import parse
from .coercion import (is_array, array_items, type_name, to_bool, to_string, to_int, to_float, to_number,
                       normalize_key, copy_value, strict_equals, loose_equals, compare, arithmetic)


class _Break(Exception): pass
class _Continue(Exception): pass

class _Return(Exception):
    def __init__(self, value):
        self.value = value


@dataclass
class Frame:
    vars: dict[str, Any]
    this: ScriptObject | None = None
    cls: ScriptClass | None = None
    function: str | None = None


_ESCAPES = {'n': "\n", 't': "\t", 'r': "\r", 'v': "\v", 'e': "\x1b", 'f': "\f", '\\': "\\", '$': "$", '"': '"'}

_INTERPOLATION_RE = re.compile(
    r'\\(u\{[0-9a-fA-F]+\}|x[0-9a-fA-F]{1,2}|[0-7]{1,3}|.)'            # escape sequence
    r'|\{\$([^}]*)\}'                                                   # {$expression}
    r'|\$([A-Za-z_]\w*)(?:\[(-?\w+)\]|->([A-Za-z_]\w*))?', re.S)        # $var, $var[key], $var->prop


def _unescape(seq: str) -> str:
    if seq in _ESCAPES: return _ESCAPES[seq]
    if seq.startswith('u{'): return chr(int(seq[2:-1], 16))
    if seq[0] == 'x' and len(seq) > 1: return chr(int(seq[1:], 16))
    if seq[0] in '01234567': return chr(int(seq, 8) % 256)
    return '\\' + seq


def _name(node) -> str:
    """Unqualified name from a `qualified_name` tree, since namespaces are not resolved."""
    if isinstance(node, lark.Token): return str(node)
    return str(node.children[-1])


def _first(node: lark.Tree, data: str):
    return next((c for c in node.children if isinstance(c, lark.Tree) and c.data == data), None)


def _token(node: lark.Tree, kind: str):
    return next((c for c in node.children if isinstance(c, lark.Token) and c.type == kind), None)


def _params(node: lark.Tree | None) -> list[Parameter]:
    result = []
    for param in (node.children if node is not None else []):
        default = next((c for c in param.children if isinstance(c, lark.Tree) and c.data != 'type_hint'), None)
        result.append(Parameter(_token(param, 'VARIABLE')[1:], default))
    return result


class Interpreter:
    """Tree-walking evaluator for parsed units, sharing declarations through its `Library`."""

    def __init__(self, library: Library):
        self.library = library
        self.silenced = 0

    # Units ───────────────────────────────────────────────────────────────────────────────────
    def run_unit(self, statements: list, frame: Frame) -> Any:
        self.hoist(statements)
        try:
            self.execute(statements, frame)
        except _Return as ret:
            return ret.value
        except (_Break, _Continue):
            raise PrayogRuntimeError("'break' not in the 'loop' or 'switch' context") from None
        return None

    def hoist(self, statements: list) -> None:
        for stmt in statements:
            if stmt.data == 'function_decl':
                self.declare_function(stmt)

    def write(self, text: str) -> None:
        sys.stdout.write(text)

    def warn(self, message: str) -> None:
        if not self.silenced:
            self.write(f"Warning: {message}\n")

    # Statements ──────────────────────────────────────────────────────────────────────────────
    def execute(self, statements: list, frame: Frame) -> None:
        for stmt in statements:
            self.exec_stmt(stmt, frame)

    def exec_block(self, block: lark.Tree, frame: Frame) -> None:
        self.execute(block.children, frame)

    def exec_stmt(self, node: lark.Tree, frame: Frame) -> None:
        ch = node.children
        match node.data:
            case 'expr_stmt':
                self.eval(ch[0], frame)
            case 'echo_stmt':
                for child in ch: self.write(self.stringify(self.eval(child, frame)))
            case 'print_stmt':
                self.write(self.stringify(self.eval(ch[0], frame)))
            case 'if_stmt':
                self.exec_if(ch, frame)
            case 'while_stmt':
                while to_bool(self.eval(ch[0], frame)):
                    if not self.loop_body(ch[1], frame): break
            case 'do_while_stmt':
                while self.loop_body(ch[0], frame) and to_bool(self.eval(ch[1], frame)):
                    pass
            case 'for_stmt':
                self.exec_for(ch, frame)
            case 'foreach_stmt':
                self.exec_foreach(ch, frame)
            case 'function_decl':
                existing = self.library.functions.get(str(_token(node, 'NAME')).lower())
                if existing is None or existing.body is not _first(node, 'block').children:
                    self.declare_function(node)
            case 'class_decl':
                self.declare_class(node)
            case 'return_stmt':
                raise _Return(self.eval(ch[0], frame) if ch else None)
            case 'break_stmt':
                raise _Break()
            case 'continue_stmt':
                raise _Continue()
            case 'unset_stmt':
                for target in ch: self.unset(target, frame)
            case 'throw_stmt':
                self.throw(self.eval(ch[0], frame))
            case 'try_stmt':
                self.exec_try(ch, frame)
            case 'namespace_stmt' | 'use_stmt' | 'empty_stmt':
                pass
            case _:
                raise PrayogRuntimeError(f"Unsupported statement `{node.data}`.")

    def loop_body(self, block: lark.Tree, frame: Frame) -> bool:
        """Run one iteration, returning False when the loop should stop."""
        try:
            self.exec_block(block, frame)
        except _Break:
            return False
        except _Continue:
            pass
        return True

    def exec_if(self, ch: list, frame: Frame) -> None:
        cond, body, *clauses = ch
        if to_bool(self.eval(cond, frame)):
            return self.exec_block(body, frame)
        for clause in clauses:
            if clause.data == 'else_clause':
                return self.exec_block(clause.children[0], frame)
            cond, body = clause.children
            if to_bool(self.eval(cond, frame)):
                return self.exec_block(body, frame)

    def exec_for(self, ch: list, frame: Frame) -> None:
        init, test, step, body = ch
        for expr in init.children: self.eval(expr, frame)
        while True:
            results = [self.eval(expr, frame) for expr in test.children]
            if results and not to_bool(results[-1]): break
            if not self.loop_body(body, frame): break
            for expr in step.children: self.eval(expr, frame)

    def exec_foreach(self, ch: list, frame: Frame) -> None:
        subject, target, body = ch
        value = self.eval(subject, frame)
        if isinstance(value, ScriptObject): pairs = list(value.props.items())
        elif is_array(value): pairs = list(array_items(copy_value(value)))
        else:
            self.warn(f"foreach() argument must be of type array|object, {type_name(value)} given")
            return
        names = [str(tok)[1:] for tok in target.children]
        for key, item in pairs:
            if len(names) == 2: frame.vars[names[0]] = key
            frame.vars[names[-1]] = item
            if not self.loop_body(body, frame): break

    def exec_try(self, ch: list, frame: Frame) -> None:
        body, *handlers = ch
        finally_clause = handlers.pop() if handlers and handlers[-1].data == 'finally_clause' else None
        try:
            self.exec_block(body, frame)
        except PrayogRuntimeError as exc:
            thrown = exc.exception if isinstance(exc, PrayogThrown) else self.error_object(exc)
            for clause in handlers:
                names = [_name(c) for c in clause.children if isinstance(c, lark.Tree) and c.data == 'qualified_name']
                if any(n.lower() == 'throwable' or thrown.cls.is_subclass_of(n) for n in names):
                    if (var := _token(clause, 'VARIABLE')) is not None:
                        frame.vars[var[1:]] = thrown
                    self.exec_block(clause.children[-1], frame)
                    break
            else:
                raise
        finally:
            if finally_clause is not None:
                self.exec_block(finally_clause.children[0], frame)

    def throw(self, value: Any):
        if not isinstance(value, ScriptObject) or not any(value.cls.is_subclass_of(n) for n in ('Exception', 'Error')):
            raise PrayogRuntimeError("Can only throw objects")
        raise PrayogThrown(value)

    def error_object(self, exc: PrayogError) -> ScriptObject:
        """Script-visible object for an engine error, so that `catch` clauses can handle it."""
        name = exc.php_class if exc.php_class.lower() in self.library.classes else 'Error'
        return self.instantiate(self.library.get_class(name), [exc.message])

    # Declarations ────────────────────────────────────────────────────────────────────────────
    def declare_function(self, node: lark.Tree) -> None:
        name = _token(node, 'NAME')
        self.library.add_function(FunctionDef(str(name), _params(_first(node, 'params')), _first(node, 'block').children))

    def declare_class(self, node: lark.Tree) -> None:
        name = str(_token(node, 'NAME'))
        parent = _first(node, 'qualified_name')
        cls = ScriptClass(name, self.library.get_class(_name(parent)) if parent is not None else None, {}, {})
        for member in node.children:
            if not isinstance(member, lark.Tree): continue
            match member.data:
                case 'method_decl':
                    method = FunctionDef(str(_token(member, 'NAME')), _params(_first(member, 'params')),
                                         _first(member, 'block').children, owner=cls)
                    cls.methods[method.name.lower()] = method
                case 'property_decl':
                    default = next((c for c in member.children if isinstance(c, lark.Tree)
                                    and c.data not in ('modifiers', 'type_hint')), None)
                    cls.properties[str(_token(member, 'VARIABLE'))[1:]] = default
                case 'const_decl':
                    value_node = next(c for c in member.children if isinstance(c, lark.Tree) and c.data != 'modifiers')
                    cls.constants[str(_token(member, 'NAME'))] = self.eval(value_node, Frame({}, cls=cls))
        self.library.add_class(cls)

    # Expressions ─────────────────────────────────────────────────────────────────────────────
    def eval(self, node: lark.Tree, frame: Frame) -> Any:
        ch = node.children
        match node.data:
            case 'var':
                return self.read_var(str(ch[0])[1:], frame)
            case 'int_lit':
                return self.parse_int(str(ch[0]))
            case 'float_lit':
                return float(ch[0])
            case 'dq_string':
                return self.interpolate(str(ch[0])[1:-1], frame)
            case 'sq_string':
                return re.sub(r"\\([\\'])", r'\1', str(ch[0])[1:-1])
            case 'constant':
                return self.library.get_constant(_name(ch[0]))
            case 'class_const':
                return self.class_constant(_name(ch[0]), str(ch[1]), frame)
            case 'array_lit':
                return self.build_array(ch[0].children, frame)
            case 'assign':
                value = copy_value(self.eval(ch[2], frame))
                self.assign(ch[0], value, frame)
                return value
            case 'compound_assign':
                return self.compound_assign(ch[0], str(ch[1])[:-1], ch[2], frame)
            case 'ternary':
                return self.eval(ch[1] if to_bool(self.eval(ch[0], frame)) else ch[2], frame)
            case 'short_ternary':
                return value if to_bool(value := self.eval(ch[0], frame)) else self.eval(ch[1], frame)
            case 'null_coalesce':
                return value if (value := self.eval_quiet(ch[0], frame)) is not None else self.eval(ch[1], frame)
            case 'logical_or':
                return to_bool(self.eval(ch[0], frame)) or to_bool(self.eval(ch[1], frame))
            case 'logical_and':
                return to_bool(self.eval(ch[0], frame)) and to_bool(self.eval(ch[1], frame))
            case 'logical_not':
                return not to_bool(self.eval(ch[0], frame))
            case 'binop':
                return self.binary(str(ch[1]), self.eval(ch[0], frame), self.eval(ch[2], frame))
            case 'unary_op':
                value = self.eval(ch[1], frame)
                return arithmetic('*', value, -1) if ch[0] == '-' else to_number(value, '*', 1)
            case 'cast':
                return self.cast(re.sub(r'[()\s]', '', str(ch[0])).lower(), self.eval(ch[1], frame))
            case 'instanceof_expr':
                value, name = self.eval(ch[0], frame), _name(ch[1])
                if isinstance(value, Closure): return name.lower() == 'closure'
                return isinstance(value, ScriptObject) and value.cls.is_subclass_of(self.resolve_class_name(name, frame))
            case 'pre_inc' | 'pre_dec':
                old = self.eval(ch[1], frame)
                self.assign(ch[1], new := self.step(old, node.data == 'pre_inc'), frame)
                return new
            case 'post_inc' | 'post_dec':
                old = self.eval(ch[0], frame)
                self.assign(ch[0], self.step(old, node.data == 'post_inc'), frame)
                return old
            case 'silence':
                self.silenced += 1
                try:
                    return self.eval(ch[0], frame)
                finally:
                    self.silenced -= 1
            case 'index':
                if len(ch) == 1: raise PrayogRuntimeError("Cannot use [] for reading")
                return self.read_index(self.eval(ch[0], frame), self.eval(ch[1], frame))
            case 'prop':
                return self.read_prop(self.eval(ch[0], frame), str(ch[1]))
            case 'method_call':
                target = self.eval(ch[0], frame)
                return self.call_method(target, str(ch[1]), self.eval_args(ch[2], frame))
            case 'static_call':
                return self.static_call(_name(ch[0]), str(ch[1]), self.eval_args(ch[2], frame), frame)
            case 'call':
                return self.call_function(_name(ch[0]), ch[1].children, frame)
            case 'var_call':
                return self.call_value(self.read_var(str(ch[0])[1:], frame), self.eval_args(ch[1], frame))
            case 'new_expr':
                cls = self.library.get_class(self.resolve_class_name(_name(ch[0]), frame))
                return self.instantiate(cls, self.eval_args(ch[1], frame) if len(ch) > 1 else [])
            case 'isset_expr':
                return all(self.eval_quiet(c, frame) is not None for c in ch)
            case 'empty_expr':
                return not to_bool(self.eval_quiet(ch[0], frame))
            case 'closure':
                uses = _first(node, 'closure_uses')
                captured = {}
                for tok in (uses.children if uses is not None else []):
                    captured[tok[1:]] = copy_value(frame.vars.get(tok[1:]))
                return Closure(_params(ch[0]), _first(node, 'block').children, captured, bound_this=frame.this)
            case 'arrow_fn':
                captured = {k: copy_value(v) for k, v in frame.vars.items()}
                return Closure(_params(ch[0]), ch[-1], captured, arrow=True, bound_this=frame.this)
        raise PrayogRuntimeError(f"Unsupported expression `{node.data}`.")

    def eval_args(self, node: lark.Tree, frame: Frame) -> list:
        return [self.eval(c, frame) for c in node.children]

    def eval_quiet(self, node: lark.Tree, frame: Frame) -> Any:
        """Evaluates without undefined warnings, as needed by `isset`, `empty` and `??`."""
        match node.data:
            case 'var':
                name = str(node.children[0])[1:]
                return frame.this if name == 'this' else frame.vars.get(name)
            case 'index' if len(node.children) == 2:
                container = self.eval_quiet(node.children[0], frame)
                key = self.eval(node.children[1], frame)
                if is_array(container):
                    key = normalize_key(key)
                    if isinstance(container, dict): return container.get(key)
                    return container[key] if isinstance(key, int) and 0 <= key < len(container) else None
                if isinstance(container, str):
                    offset = to_int(key)
                    return container[offset] if -len(container) <= offset < len(container) else None
                return None
            case 'prop':
                target = self.eval_quiet(node.children[0], frame)
                return target.props.get(str(node.children[1])) if isinstance(target, ScriptObject) else None
        return self.eval(node, frame)

    def parse_int(self, text: str) -> int | float:
        if text[:2].lower() in ('0x', '0b'): value = int(text, 0)
        elif len(text) > 1 and text[0] == '0': value = int(text, 8)
        else: value = int(text)
        return value if value <= sys.maxsize else float(value)

    def interpolate(self, raw: str, frame: Frame) -> str:
        def _replace(m: re.Match) -> str:
            if (esc := m.group(1)) is not None: return _unescape(esc)
            if (expr := m.group(2)) is not None: return self.stringify(self.eval_source(f"${expr}", frame))
            value = self.read_var(m.group(3), frame)
            if (key := m.group(4)) is not None:
                value = self.read_index(value, int(key) if key.lstrip('-').isdigit() else key)
            elif (prop := m.group(5)) is not None:
                value = self.read_prop(value, prop)
            return self.stringify(value)
        return _INTERPOLATION_RE.sub(_replace, raw)

    def eval_source(self, source: str, frame: Frame) -> Any:
        stmt = parse(source + ';').children[0]
        if stmt.data != 'expr_stmt':
            raise PrayogRuntimeError(f"Invalid interpolation `{{{source}}}`.")
        return self.eval(stmt.children[0], frame)

    def build_array(self, items: list, frame: Frame) -> list | dict:
        result: list | dict = []
        for item in items:
            if item.data == 'pair':
                key, value = self.eval(item.children[0], frame), self.eval(item.children[1], frame)
                result = self.array_set(result, key, copy_value(value))
            else:
                result = self.array_set(result, None, copy_value(self.eval(item, frame)))
        return result

    def binary(self, op: str, a: Any, b: Any) -> Any:
        match op:
            case '.': return self.stringify(a) + self.stringify(b)
            case '==': return loose_equals(a, b)
            case '!=': return not loose_equals(a, b)
            case '===': return strict_equals(a, b)
            case '!==': return not strict_equals(a, b)
            case '<': return compare(a, b) < 0
            case '<=': return compare(a, b) <= 0
            case '>': return compare(a, b) > 0
            case '>=': return compare(a, b) >= 0
            case '<=>': return compare(a, b)
        return arithmetic(op, a, b)

    def compound_assign(self, target: lark.Tree, op: str, value_node: lark.Tree, frame: Frame) -> Any:
        if op == '??':
            if (current := self.eval_quiet(target, frame)) is not None: return current
            value = copy_value(self.eval(value_node, frame))
        else:
            current = self.eval(target, frame)
            value = self.binary(op, current, self.eval(value_node, frame))
        self.assign(target, value, frame)
        return value

    def cast(self, kind: str, value: Any) -> Any:
        match kind:
            case 'int' | 'integer': return to_int(value)
            case 'float' | 'double': return to_float(value)
            case 'string': return self.stringify(value)
            case 'bool' | 'boolean': return to_bool(value)
        if is_array(value): return value
        if isinstance(value, ScriptObject): return copy_value(value.props)
        return [] if value is None else [value]

    def step(self, value: Any, up: bool) -> Any:
        if value is None: return 1 if up else None
        if isinstance(value, bool): return value
        if value == '': return '1' if up else -1
        if isinstance(value, (int, float, str)):
            return arithmetic('+' if up else '-', value, 1)
        raise PrayogTypeError(f"Cannot {'increment' if up else 'decrement'} {type_name(value)}")

    def stringify(self, value: Any) -> str:
        if isinstance(value, ScriptObject):
            if (method := value.cls.find_method('__toString')) is not None:
                return to_string(self.invoke(method, [], this=value))
            raise PrayogRuntimeError(f"Object of class {value.cls.name} could not be converted to string")
        if isinstance(value, Closure):
            raise PrayogRuntimeError("Object of class Closure could not be converted to string")
        if is_array(value):
            self.warn("Array to string conversion")
        return to_string(value)

    # Variables, elements & properties ────────────────────────────────────────────────────────
    def read_var(self, name: str, frame: Frame) -> Any:
        if name == 'this':
            if frame.this is None: raise PrayogRuntimeError("Using $this when not in object context")
            return frame.this
        if name in frame.vars:
            return frame.vars[name]
        self.warn(f"Undefined variable ${name}")
        return None

    def read_index(self, container: Any, key: Any) -> Any:
        match container:
            case list() | dict():
                key = normalize_key(key)
                if isinstance(container, dict) and key in container: return container[key]
                if isinstance(container, list) and isinstance(key, int) and 0 <= key < len(container): return container[key]
                self.warn(f'Undefined array key {key}' if isinstance(key, int) else f'Undefined array key "{key}"')
                return None
            case str():
                offset = to_int(key)
                if -len(container) <= offset < len(container): return container[offset]
                self.warn(f'Uninitialized string offset {offset}')
                return ""
            case ScriptObject():
                raise PrayogRuntimeError(f"Cannot use object of type {container.cls.name} as array")
        self.warn(f"Trying to access array offset on value of type {type_name(container)}")
        return None

    def read_prop(self, target: Any, name: str) -> Any:
        if not isinstance(target, ScriptObject):
            self.warn(f'Attempt to read property "{name}" on {type_name(target)}')
            return None
        if name in target.props:
            return target.props[name]
        self.warn(f"Undefined property: {target.cls.name}::${name}")
        return None

    def array_set(self, container: Any, key: Any, value: Any) -> list | dict:
        """Stores an element, returning the container which may be a new object after conversion."""
        if container is None:
            container = []
        if not is_array(container):
            raise PrayogRuntimeError("Cannot use a scalar value as an array")
        if isinstance(container, list):
            if key is None:
                container.append(value)
                return container
            key = normalize_key(key)
            if isinstance(key, int) and 0 <= key < len(container):
                container[key] = value
                return container
            if key == len(container):
                container.append(value)
                return container
            container = dict(enumerate(container))
        if key is None:
            key = max((k for k in container if isinstance(k, int)), default=-1) + 1
        container[normalize_key(key)] = value
        return container

    def assign(self, target: lark.Tree, value: Any, frame: Frame) -> None:
        ch = target.children
        match target.data:
            case 'var':
                if (name := str(ch[0])[1:]) == 'this':
                    raise PrayogRuntimeError("Cannot re-assign $this")
                frame.vars[name] = value
            case 'index':
                container = self.eval_quiet(ch[0], frame)
                if isinstance(container, ScriptObject):
                    raise PrayogRuntimeError(f"Cannot use object of type {container.cls.name} as array")
                key = self.eval(ch[1], frame) if len(ch) == 2 else None
                if (updated := self.array_set(container, key, value)) is not container:
                    self.assign(ch[0], updated, frame)
            case 'prop':
                owner = self.eval(ch[0], frame)
                if not isinstance(owner, ScriptObject):
                    raise PrayogRuntimeError(f'Attempt to assign property "{ch[1]}" on {type_name(owner)}')
                owner.props[str(ch[1])] = value
            case _:
                raise PrayogRuntimeError("Can't use function return value in write context")

    def unset(self, target: lark.Tree, frame: Frame) -> None:
        ch = target.children
        match target.data:
            case 'var':
                frame.vars.pop(str(ch[0])[1:], None)
            case 'index' if len(ch) == 2:
                container, key = self.eval_quiet(ch[0], frame), normalize_key(self.eval(ch[1], frame))
                if isinstance(container, dict):
                    container.pop(key, None)
                elif isinstance(container, list) and isinstance(key, int) and 0 <= key < len(container):
                    if key == len(container) - 1:
                        container.pop()
                    else:
                        self.assign(ch[0], {k: v for k, v in enumerate(container) if k != key}, frame)
            case 'prop':
                if isinstance(owner := self.eval_quiet(ch[0], frame), ScriptObject):
                    owner.props.pop(str(ch[1]), None)
            case _:
                raise PrayogRuntimeError("Cannot unset this expression")

    # Calls ───────────────────────────────────────────────────────────────────────────────────
    def call_function(self, name: str, arg_nodes: list, frame: Frame) -> Any:
        lname = name.lower()
        if lname in self.library.by_ref and arg_nodes:
            current = self.eval_quiet(arg_nodes[0], frame)
            rest = [self.eval(a, frame) for a in arg_nodes[1:]]
            result, updated = self.call_builtin(lname, [current] + rest)
            self.assign(arg_nodes[0], updated, frame)
            return result
        return self.call_named(name, [self.eval(a, frame) for a in arg_nodes])

    def call_named(self, name: str, args: list) -> Any:
        lname = name.lower()
        if (fn := self.library.functions.get(lname)) is not None:
            return self.invoke(fn, args)
        if lname in self.library.by_ref:
            return self.call_builtin(lname, args)[0]
        if lname in self.library.builtins or lname in self.library.combinators:
            return self.call_builtin(lname, args)
        raise PrayogNameError(f"Call to undefined function {name}()")

    def call_builtin(self, lname: str, args: list) -> Any:
        if (comb := self.library.combinators.get(lname)) is not None:
            fn, args = comb, [self] + args
        else:
            fn = self.library.builtins[lname]
        try:
            return fn(*args)
        except PrayogError:
            raise
        except TypeError as exc:
            message = re.sub(r'^\w+\(\) ', '', str(exc))
            error = PrayogArgumentCountError if 'positional argument' in message else PrayogTypeError
            raise error(f"{lname}(): {message}") from exc
        except (ValueError, IndexError, KeyError, AttributeError) as exc:
            raise PrayogRuntimeError(f"{lname}(): {exc}") from exc

    def is_callable(self, value: Any) -> bool:
        match value:
            case Closure(): return True
            case str(): return self.library.has_function(value.lstrip('\\'))
            case ScriptObject(): return value.cls.find_method('__invoke') is not None
            case [ScriptObject() as obj, str() as method]: return obj.cls.find_method(method) is not None
        return False

    def call_value(self, callee: Any, args: list) -> Any:
        match callee:
            case Closure():
                return self.invoke_closure(callee, args)
            case str() if '::' in callee:
                cls_name, method = callee.split('::', 1)
                return self.static_call(cls_name, method, args, Frame({}))
            case str():
                return self.call_named(callee.lstrip('\\'), args)
            case ScriptObject():
                return self.call_method(callee, '__invoke', args)
            case [ScriptObject() as obj, str() as method]:
                return self.call_method(obj, method, args)
        raise PrayogRuntimeError(f"Value of type {type_name(callee)} is not callable")

    def bind(self, params: list[Parameter], args: list, frame: Frame, name: str) -> None:
        if len(args) < (required := sum(1 for p in params if p.default is None)):
            quantity = 'exactly' if required == len(params) else 'at least'
            raise PrayogArgumentCountError(f"Too few arguments to function {name}(), {len(args)} passed "
                                           f"and {quantity} {required} expected")
        for i, param in enumerate(params):
            frame.vars[param.name] = copy_value(args[i]) if i < len(args) else self.eval(param.default, frame)

    def invoke(self, fn: FunctionDef, args: list, this: ScriptObject | None = None) -> Any:
        qualified = f"{fn.owner.name}::{fn.name}" if fn.owner is not None else fn.name
        local = Frame({}, this=this, cls=fn.owner, function=qualified)
        self.bind(fn.params, args, local, qualified)
        return self.run_body(fn.body, local)

    def invoke_closure(self, closure: Closure, args: list) -> Any:
        local = Frame({k: copy_value(v) for k, v in closure.captured.items()}, this=closure.bound_this,
                      cls=closure.bound_this.cls if closure.bound_this is not None else None, function='{closure}')
        self.bind(closure.params, args, local, '{closure}')
        if closure.arrow:
            return self.eval(closure.body, local)
        return self.run_body(closure.body, local)

    def run_body(self, body: list, frame: Frame) -> Any:
        try:
            self.execute(body, frame)
        except _Return as ret:
            return ret.value
        except (_Break, _Continue):
            raise PrayogRuntimeError("'break' not in the 'loop' or 'switch' context") from None
        return None

    # Objects ─────────────────────────────────────────────────────────────────────────────────
    def instantiate(self, cls: ScriptClass, args: list) -> ScriptObject:
        obj = ScriptObject(cls)
        for c in reversed(list(cls.lineage())):
            for name, default in c.properties.items():
                obj.props[name] = copy_value(self.eval(default, Frame({}, cls=c))) if default is not None else None
        if (ctor := cls.find_method('__construct')) is not None:
            self.invoke(ctor, args, this=obj)
        return obj

    def call_method(self, target: Any, name: str, args: list) -> Any:
        if isinstance(target, Closure):
            if name.lower() == '__invoke': return self.invoke_closure(target, args)
        if not isinstance(target, ScriptObject):
            raise PrayogRuntimeError(f"Call to a member function {name}() on {type_name(target)}")
        if (method := target.cls.find_method(name)) is None:
            if isinstance(prop := target.props.get(name), Closure):
                return self.invoke_closure(prop, args)
            raise PrayogRuntimeError(f"Call to undefined method {target.cls.name}::{name}()")
        return self.invoke(method, args, this=target)

    def resolve_class_name(self, name: str, frame: Frame) -> str:
        match name.lower():
            case 'self' | 'static':
                if frame.cls is None: raise PrayogRuntimeError(f'Cannot use "{name}" when no class scope is active')
                return frame.cls.name
            case 'parent':
                if frame.cls is None or frame.cls.parent is None:
                    raise PrayogRuntimeError('Cannot use "parent" when current class scope has no parent')
                return frame.cls.parent.name
        return name

    def static_call(self, cls_name: str, method_name: str, args: list, frame: Frame) -> Any:
        cls = self.library.get_class(self.resolve_class_name(cls_name, frame))
        if (method := cls.find_method(method_name)) is None:
            raise PrayogRuntimeError(f"Call to undefined method {cls.name}::{method_name}()")
        # Calls through parent:: and self:: keep the current object.
        this = frame.this if frame.this is not None and frame.this.cls.is_subclass_of(cls.name) else None
        return self.invoke(method, args, this=this)

    def class_constant(self, cls_name: str, name: str, frame: Frame) -> Any:
        cls = self.library.get_class(self.resolve_class_name(cls_name, frame))
        if name.lower() == 'class':
            return cls.name
        try:
            return cls.find_constant(name)
        except KeyError:
            raise PrayogNameError(f'Undefined constant {cls.name}::{name}') from None
