# backend/src/honeyward/services/signatures.py
#
# Signature catalog: the canonical detection patterns per attack category.
# Read-only after import. Extend by adding rows to _RAW_SIGNATURES; the
# classifier never holds literals of its own.
#
# Each row: (name, regex, default severity, canonical example payload)
# All patterns are compiled case-insensitive with DOTALL so embedded
# newlines never break a match. Every gap between two anchors is bounded
# so matching cost stays roughly linear in the input length.

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from honeyward.models import Category, Severity, Signature

CATALOG_VERSION = "2024.1"

PATTERN_FLAGS = re.IGNORECASE | re.DOTALL

# ---------------------------------------------------------------------------
# Raw signature table
# ---------------------------------------------------------------------------

_RAW_SIGNATURES: Dict[Category, List[Tuple[str, str, Severity, str]]] = {
    Category.XSS: [
        ("script_tag",        r"<script[^>]{0,256}>.{0,1024}?</script>",  Severity.HIGH, "<script>alert(1)</script>"),
        ("javascript_uri",    r"javascript:",                             Severity.HIGH, "javascript:void(0)"),
        ("event_handler",     r"\bon\w+\s*=",                             Severity.HIGH, "<img src=x onerror=steal()>"),
        ("iframe_tag",        r"<iframe[^>]{0,256}>.{0,1024}?</iframe>",  Severity.HIGH, "<iframe src=//evil></iframe>"),
        ("object_tag",        r"<object[^>]{0,256}>.{0,1024}?</object>",  Severity.HIGH, "<object data=x></object>"),
        ("embed_tag",         r"<embed[^>]{0,256}>",                      Severity.HIGH, "<embed src=x.swf>"),
        ("svg_onload",        r"<svg[^>]{0,256}onload[^>]{0,256}>",       Severity.HIGH, "<svg/onload=x>"),
        ("eval_call",         r"\beval\s*\(",                             Severity.HIGH, "eval (payload)"),
        ("alert_call",        r"\balert\s*\(",                            Severity.HIGH, "alert(document.cookie)"),
        ("prompt_call",       r"\bprompt\s*\(",                           Severity.HIGH, "prompt(1)"),
        ("confirm_call",      r"\bconfirm\s*\(",                          Severity.HIGH, "confirm(1)"),
    ],
    Category.SQL_INJECTION: [
        ("boolean_tautology", r"\b(or|and)\b[^=\n]{0,64}=[^'\"`\n]{0,64}['\"`]",
                                                                Severity.CRITICAL, "x' or 1='1"),
        ("quoted_tautology",  r"'\s{0,16}(or|and)\s{0,16}'[^'\n]{0,64}'\s{0,16}=",
                                                                Severity.CRITICAL, "' OR '1'='1"),
        ("union_select",      r"\bunion\s+(all\s+)?select\b",   Severity.CRITICAL, "1 UNION SELECT password FROM users"),
        ("drop_table",        r"\bdrop\s+table\b",              Severity.CRITICAL, "x; DROP TABLE patients"),
        ("insert_into",       r"\binsert\s+into\b",             Severity.CRITICAL, "INSERT INTO admins VALUES (1)"),
        ("delete_from",       r"\bdelete\s+from\b",             Severity.CRITICAL, "DELETE FROM logs"),
        ("update_set",        r"\bupdate\s{1,16}\S{1,64}[^\n]{0,64}?\s{1,16}set\b",
                                                                Severity.CRITICAL, "UPDATE users SET role=admin"),
        ("exec_call",         r"\bexec\s*\(",                   Severity.CRITICAL, "exec(xp_cmdshell)"),
        ("sp_executesql",     r"\bsp_executesql\b",             Severity.CRITICAL, "sp_executesql @q"),
        ("line_comment",      r"--",                            Severity.CRITICAL, "admin'--"),
        ("block_comment",     r"/\*.{0,256}?\*/",               Severity.CRITICAL, "1/**/OR/**/1"),
        ("stacked_query",     r";\s*(select|insert|update|delete|drop|exec|shutdown)\b",
                                                                Severity.CRITICAL, "1; SELECT 1"),
    ],
    Category.PATH_TRAVERSAL: [
        ("dot_dot_slash",     r"\.\.[/\\]",          Severity.HIGH, "../../etc/passwd"),
        ("dot_dot_enc_slash", r"\.\.%2f",            Severity.HIGH, "..%2fetc%2fpasswd"),
        ("dot_dot_enc_bslash", r"\.\.%5c",           Severity.HIGH, "..%5cwindows"),
        ("enc_dot_dot_slash", r"%2e%2e%2f",          Severity.HIGH, "%2e%2e%2fetc%2fpasswd"),
        ("enc_dot_dot_bslash", r"%2e%2e%5c",         Severity.HIGH, "%2E%2E%5Cboot.ini"),
    ],
    Category.COMMAND_INJECTION: [
        ("shell_metachar",    r"[;&|`$(){}\[\]]",    Severity.CRITICAL, "name; id"),
        ("cmd_cat",           r"\bcat\b",            Severity.CRITICAL, "cat /etc/shadow"),
        ("cmd_ls",            r"\bls\b",             Severity.CRITICAL, "ls -la"),
        ("cmd_ps",            r"\bps\b",             Severity.CRITICAL, "ps aux"),
        ("cmd_netstat",       r"\bnetstat\b",        Severity.CRITICAL, "netstat -an"),
        ("cmd_whoami",        r"\bwhoami\b",         Severity.CRITICAL, "whoami"),
        ("cmd_pwd",           r"\bpwd\b",            Severity.CRITICAL, "pwd"),
        ("cmd_cd",            r"\bcd\b",             Severity.CRITICAL, "cd /tmp"),
        ("cmd_rm",            r"\brm\b",             Severity.CRITICAL, "rm -rf /"),
        ("cmd_mv",            r"\bmv\b",             Severity.CRITICAL, "mv a b"),
        ("cmd_cp",            r"\bcp\b",             Severity.CRITICAL, "cp /etc/passwd /tmp"),
    ],
    Category.LDAP_INJECTION: [
        ("wildcard_close",    r"\*\)",               Severity.HIGH, "admin*)"),
        ("or_filter",         r"\(\|",               Severity.HIGH, "(|(uid=x))"),
        ("and_filter",        r"\(&",                Severity.HIGH, "(&(uid=x))"),
        ("not_filter",        r"\(!",                Severity.HIGH, "(!(uid=x))"),
        ("filter_break",      r"\)\(",               Severity.HIGH, "x)(cn=*"),
    ],
}


def _build_catalog() -> Mapping[Category, Tuple[Signature, ...]]:
    catalog = {}
    for category, rows in _RAW_SIGNATURES.items():
        catalog[category] = tuple(
            Signature(
                category= category,
                name=     name,
                pattern=  re.compile(regex, PATTERN_FLAGS),
                severity= severity,
                example=  example,
            )
            for name, regex, severity, example in rows
        )
    return MappingProxyType(catalog)


CATALOG = _build_catalog()


# ---------------------------------------------------------------------------
# Public accessors
# ---------------------------------------------------------------------------

def all_categories() -> List[Category]:
    return list(CATALOG.keys())


def patterns_for(category) -> Tuple[Signature, ...]:
    """Ordered signatures for a category. Accepts the enum or its value."""
    return CATALOG[Category(category)]


def all_signatures() -> List[Signature]:
    return [sig for sigs in CATALOG.values() for sig in sigs]
