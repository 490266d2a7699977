"""Collision-free Java identifiers for user-chosen block names."""

from __future__ import annotations

import re
from enum import Enum

JAVA_KEYWORDS = (
    "abstract,assert,boolean,break,case,catch,class,const,continue,default,do,"
    "double,else,enum,extends,final,finally,float,for,goto,if,implements,import,"
    "instanceof,int,interface,long,native,new,package,private,protected,public,"
    "return,short,static,strictfp,super,switch,synchronized,this,throw,throws,"
    "transient,try,void,volatile,while"
)
JAVA_LITERALS = "false,null,true"
# Builtin names the generated code or its helpers may rely on.
BUILTIN_NAMES = (
    "abs,divmod,input,open,staticmethod,all,enumerate,ord,str,any,eval,"
    "isinstance,pow,sum,basestring,execfile,issubclass,print,bin,file,iter,"
    "property,tuple,bool,filter,len,range,type,bytearray,list,raw_input,unichr,"
    "callable,format,locals,reduce,unicode,chr,frozenset,reload,vars,"
    "classmethod,getattr,map,repr,xrange,cmp,globals,max,reversed,zip,compile,"
    "hasattr,memoryview,round,__import__,complex,hash,min,set,apply,delattr,"
    "help,next,setattr,buffer,dict,hex,object,slice,coerce,dir,id,oct,sorted,"
    "intern,equal"
)

RESERVED_WORDS: frozenset[str] = frozenset(
    ",".join((JAVA_KEYWORDS, JAVA_LITERALS, BUILTIN_NAMES)).split(",")
)

_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


class NameKind(Enum):
    VARIABLE = "VARIABLE"
    PROCEDURE = "PROCEDURE"
    CLASS = "CLASS"


def safe_name(name: str) -> str:
    """Make *name* a legal Java identifier (not necessarily unique)."""
    if not name:
        return "unnamed"
    name = _UNSAFE.sub("_", name)
    if name[0].isdigit():
        name = "my_" + name
    return name


class NameRegistry:
    """Maps (logical name, kind) pairs to identifiers for one generation pass.

    All kinds share one pool of handed-out identifiers, so a variable can
    never shadow a procedure or class of the same spelling.
    """

    def __init__(self, reserved: frozenset[str] | set[str] = RESERVED_WORDS) -> None:
        self._reserved = frozenset(reserved)
        self._db: dict[tuple[str, NameKind], str] = {}
        self._taken: set[str] = set()

    def reset(self) -> None:
        self._db.clear()
        self._taken.clear()

    def is_reserved(self, name: str) -> bool:
        return name in self._reserved

    def get_name(self, name: str, kind: NameKind) -> str:
        """Stable identifier for *name*; the same logical name (compared
        case-insensitively) always maps to the same identifier."""
        key = (name.lower(), kind)
        existing = self._db.get(key)
        if existing is not None:
            return existing
        safe = self.get_distinct_name(name, kind)
        self._db[key] = safe
        return safe

    def get_distinct_name(self, name: str, kind: NameKind) -> str:
        """Allocate a fresh identifier derived from *name*, never returned
        before in this pass."""
        base = safe_name(name)
        candidate = base
        suffix = 1
        while candidate in self._taken or candidate in self._reserved:
            suffix += 1
            candidate = f"{base}{suffix}"
        self._taken.add(candidate)
        return candidate
