"""
Script evaluators

The scanner only needs one capability from a script engine: submit source
under a chunk label, get back a classified Value or an EvaluationError.
Anything satisfying the Evaluator protocol can be plugged into the
Preprocessor; LuaEvaluator is the default, built on lupa's LuaRuntime.

Example:
    >>> evaluator = LuaEvaluator()
    >>> evaluator.execute("return 6 * 7", "@example:1")
    Value(kind=<ValueKind.NUMBER: 'number'>, payload=42)
"""

from typing import Any, Callable, Iterable, Protocol

from lupa import LuaRuntime, LuaError, lua_type

from ..models.values import Value, value_classify
from .errors import DiversionError, EvaluationError
from .log import LOG
from .surface import SurfaceRegistry


class Evaluator(Protocol):
    """Capability the scanner uses to run script source"""

    def execute(self, source: str, chunk: str) -> Value:
        """
        Run ``source`` and classify its result.

        Raises:
            EvaluationError: If the source fails to compile or run
            DiversionError: If the script misused the diversion stack
        """
        ...

    def surface_install(self, registry: SurfaceRegistry) -> None:
        """Make the lroff functions available to scripts."""
        ...


# Compiles a chunk under its label so Lua error messages name the source
# location, then runs it. Compile errors surface as ordinary Lua errors.
LUA_RUNNER = """
local load, error = load, error
return function(source, chunkname)
    local fn, err = load(source, chunkname, "t")
    if not fn then error(err, 0) end
    return fn()
end
"""

# Pure-Lua convenience wrappers defined on top of the Python bindings
LUA_PRELUDE = r"""
-- formatted emit (like C printf, uses string.format)
function lroff.printf(fmt, ...)
    lroff.emit(string.format(fmt, ...))
end

function lroff.printfln(fmt, ...)
    lroff.emitln(string.format(fmt, ...))
end

-- apply fn(v) to every element; emit non-nil returns
function lroff.map(tbl, fn)
    for _, v in ipairs(tbl) do
        local r = fn(v)
        if r ~= nil then lroff.emitln(tostring(r)) end
    end
end

-- call fn(k, v) for each pair (no output)
function lroff.foreach(tbl, fn)
    for k, v in pairs(tbl) do fn(k, v) end
end

-- scoped font change
function lroff.with_font(f, fn)
    lroff.font(f); fn(); lroff.font_previous()
end

-- scoped size change
function lroff.with_size(s, fn)
    local old = lroff.size_get()
    lroff.size(s); fn(); lroff.size(old)
end

-- emit a groff conditional: .if cond \{ body \}
function lroff.groff_if(cond, body)
    lroff.emitln(".if " .. cond .. " \\{")
    lroff.emitln(body)
    lroff.emitln(".\\}")
end

-- emit a groff .while loop
function lroff.groff_while(cond, body)
    lroff.emitln(".while " .. cond .. " \\{")
    lroff.emitln(body)
    lroff.emitln(".\\}")
end

-- join values with a separator
function lroff.concat(tbl, sep)
    sep = sep or ""
    local parts = {}
    for _, v in ipairs(tbl) do parts[#parts + 1] = tostring(v) end
    return table.concat(parts, sep)
end

-- indent helper: emit .RS / block / .RE
function lroff.indented(fn)
    lroff.request("RS")
    fn()
    lroff.request("RE")
end
"""


def lua_toPython(obj: Any) -> Any:
    """
    Convert Lua tables to Python lists at the binding boundary.

    Only the sequence part (indices 1..#t) is kept; nested tables are
    converted recursively. Other values pass through unchanged.
    """
    if lua_type(obj) == "table":
        return [lua_toPython(obj[index]) for index in range(1, len(obj) + 1)]
    return obj


class LuaEvaluator:
    """
    Evaluator backed by an embedded Lua interpreter

    Args:
        lua_paths: Extra package.path entries (e.g. "lib/?.lua")
    """

    def __init__(self, lua_paths: Iterable[str] = ()) -> None:
        self.runtime = LuaRuntime(
            encoding="utf-8",
            unpack_returned_tuples=True,
            register_eval=False,
            register_builtins=False,
        )
        self._runner = self.runtime.execute(LUA_RUNNER)
        self.path_extend(lua_paths)

    def path_extend(self, paths: Iterable[str]) -> None:
        """Append entries to Lua's package.path."""
        paths = list(paths)
        if not paths:
            return
        package = self.runtime.globals()["package"]
        package["path"] = ";".join([package["path"]] + paths)
        LOG(f"Lua package.path: {package['path']}", level=3)

    def global_set(self, name: str, value: Any) -> None:
        self.runtime.globals()[name] = value

    def global_get(self, name: str) -> Any:
        return self.runtime.globals()[name]

    def surface_install(self, registry: SurfaceRegistry) -> None:
        """
        Build the global ``lroff`` table from a surface registry.

        Every handler is wrapped so Lua tables arrive as Python lists.
        """
        functions = {spec.name: self._handler_wrap(spec.handler) for spec in registry}
        lroff = self.runtime.table_from(functions)
        lroff["_VERSION"] = registry.emitter.version()
        self.runtime.globals()["lroff"] = lroff
        self.runtime.execute(LUA_PRELUDE)
        LOG(f"Installed {len(registry)} lroff functions", level=3)

    @staticmethod
    def _handler_wrap(handler: Callable) -> Callable:
        def call(*args: Any) -> Any:
            return handler(*[lua_toPython(arg) for arg in args])
        call.__name__ = getattr(handler, "__name__", "lroff_function")
        return call

    def execute(self, source: str, chunk: str) -> Value:
        """
        Run a Lua chunk and classify what it returns.

        Args:
            source: Lua source text
            chunk: Chunk name used in Lua error messages (e.g. "@doc.ms:12")

        Returns:
            Value classified as TEXT, NUMBER or NONE

        Raises:
            EvaluationError: On Lua compile/runtime errors, or when a script
                passes arguments an lroff function cannot accept
            DiversionError: Propagated unchanged from divert_end()
        """
        try:
            result = self._runner(source, chunk)
        except DiversionError:
            raise
        except LuaError as err:
            raise EvaluationError(str(err), chunk) from err
        except (TypeError, ValueError, KeyError) as err:
            raise EvaluationError(f"{type(err).__name__}: {err}", chunk) from err
        return value_classify(result)
