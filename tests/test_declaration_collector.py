"""
Tests for declaration collection.
"""

import textwrap

from solgraph.parser import parse
from solgraph.resolution import GLOBAL_CONTRACT, collect_declarations


def _collect(*sources):
    return collect_declarations([parse(textwrap.dedent(source)) for source in sources])


class TestContractTables:
    """Per-contract declaration tables"""

    def test_state_variables_by_resolved_type(self):
        table = _collect("""
            contract Vault {
                uint total;
                mapping(address => uint128) balances;
                address[] owners;
                Token token;
                Token[] tokens;
            }
        """)

        vault = table.get("Vault")
        assert vault.state_vars == {
            "total": "uint256",
            "balances": "uint128",
            "owners": "address",
            "tokens": "Token",
        }
        assert vault.user_defined_state_vars == {"token": "Token"}
        assert vault.array_state_vars == {"owners", "tokens"}

    def test_members(self):
        table = _collect("""
            contract A {
                struct Position { uint amount; }
                event Moved(uint amount);
                error Stuck();
                modifier onlyOwner() { _; }
                constructor() {}
                function move() public {}
            }
        """)

        a = table.get("A")
        assert a.kind == "contract"
        assert list(a.functions) == ["move"]
        assert list(a.modifiers) == ["onlyOwner"]
        assert list(a.events) == ["Moved"]
        assert list(a.structs) == ["Position"]
        assert list(a.errors) == ["Stuck"]
        assert a.declares_callable("Moved")
        assert not a.declares_callable("onlyOwner")

    def test_file_level_declarations_go_to_global(self):
        table = _collect("""
            error Denied();
            function helper() pure returns (uint) { return 1; }
            contract A {}
        """)

        global_scope = table.get(GLOBAL_CONTRACT)
        assert list(global_scope.functions) == ["helper"]
        assert list(global_scope.errors) == ["Denied"]
        assert table.contract_names == ["A"]


class TestUsingFor:
    """Using-for registrations"""

    def test_declaration_order_without_duplicates(self):
        table = _collect("""
            contract A {
                using SafeMath for uint;
                using Other for uint256;
                using SafeMath for uint256;
                using Strings for *;
            }
        """)

        a = table.get("A")
        assert list(a.using_for["uint256"]) == ["SafeMath", "Other"]
        assert list(a.using_for["*"]) == ["Strings"]
        assert "bytes32" not in a.using_for

    def test_file_level_using_for(self):
        table = _collect("""
            using Strings for uint256;
            contract A {}
        """)

        assert list(table.get(GLOBAL_CONTRACT).using_for["uint256"]) == ["Strings"]


class TestDependencies:
    """Inheritance map and cross-contract tables"""

    def test_dependencies_start_with_global(self):
        table = _collect("""
            contract A {}
            contract B is A {}
            contract C is A, B {}
        """)

        assert table.dependencies() == {
            "A": [GLOBAL_CONTRACT],
            "B": [GLOBAL_CONTRACT, "A"],
            "C": [GLOBAL_CONTRACT, "A", "B"],
        }

    def test_custom_error_keeps_first_owner(self):
        table = _collect(
            "contract A { error Denied(); }",
            "contract B { error Denied(); }",
        )

        assert table.custom_errors == {"Denied": "A"}

    def test_duplicate_contract_keeps_last(self):
        table = _collect(
            "contract A { function first() public {} }",
            "contract A { function second() public {} }",
        )

        assert list(table.get("A").functions) == ["second"]
        assert table.contract_names == ["A"]

    def test_is_event(self):
        table = _collect("contract A { event Ping(); }")

        assert table.is_event("Ping")
        assert not table.is_event("Pong")
