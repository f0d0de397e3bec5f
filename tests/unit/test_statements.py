"""Tests for statement nodes: SELECT, UNION, INSERT, UPDATE and DELETE."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import pytest

from stmtcraft.ast.builder import (
    and_,
    delete_from,
    eq,
    expr,
    gt,
    ident,
    insert_into,
    select,
    union,
    union_all,
    update,
)
from stmtcraft.errors import (
    ArgumentCountMismatch,
    ArgumentError,
    MissingAlias,
    MissingConflictTarget,
    MissingFromClause,
    MissingMembers,
    MissingTable,
    MissingValues,
    NoAssignments,
    StructuralError,
    UnsupportedFeature,
    UnsupportedType,
)
from tests.conftest import render


class TestSelect:
    def test_full_query_interpolated(self, mysql) -> None:
        stmt = select("id", "name").from_("users").where(eq("id", 7)).order_by("id").limit(10)
        sql, params = render(stmt, mysql, interpolate=True)
        assert sql == "SELECT id, name FROM `users` WHERE (`id` = 7) ORDER BY id LIMIT 10"
        assert params == []

    def test_full_query_parameterized(self, postgres) -> None:
        stmt = (
            select("a", "b")
            .from_("t")
            .where("a > ?", 1)
            .where(eq("b", "x"))
            .order_desc("a")
            .limit(5)
            .offset(10)
        )
        sql, params = render(stmt, postgres)
        assert sql == (
            'SELECT a, b FROM "t" WHERE (a > $1) AND ("b" = $2) ORDER BY a DESC LIMIT 5 OFFSET 10'
        )
        assert params == [1, "x"]

    def test_star_when_no_columns(self, mysql) -> None:
        assert render(select().from_("t"), mysql)[0] == "SELECT * FROM `t`"

    def test_distinct(self, mysql) -> None:
        assert render(select("a").distinct().from_("t"), mysql)[0] == "SELECT DISTINCT a FROM `t`"

    def test_ident_columns(self, postgres) -> None:
        stmt = select(ident("a"), ident("t.b")).from_("t")
        assert render(stmt, postgres)[0] == 'SELECT "a", "t"."b" FROM "t"'

    def test_source_alias(self, mysql) -> None:
        assert render(select("u.id").from_("users", "u"), mysql)[0] == (
            "SELECT u.id FROM `users` AS `u`"
        )

    def test_group_by_having(self, mysql) -> None:
        stmt = (
            select("dept", "COUNT(*)")
            .from_("emp")
            .group_by("dept")
            .having("COUNT(*) > ?", 3)
            .order_asc("dept")
        )
        sql, params = render(stmt, mysql)
        assert sql == (
            "SELECT dept, COUNT(*) FROM `emp` GROUP BY dept HAVING (COUNT(*) > ?) ORDER BY dept ASC"
        )
        assert params == [3]

    def test_joins(self, mysql) -> None:
        stmt = (
            select("u.name", "o.total")
            .from_("users", "u")
            .join("orders", "o.user_id = u.id AND o.total > ?", 100, alias="o")
            .left_join("addresses", "a.user_id = u.id", alias="a")
        )
        sql, params = render(stmt, mysql)
        assert sql == (
            "SELECT u.name, o.total FROM `users` AS `u`"
            " INNER JOIN `orders` AS `o` ON o.user_id = u.id AND o.total > ?"
            " LEFT JOIN `addresses` AS `a` ON a.user_id = u.id"
        )
        assert params == [100]

    def test_full_join_capability(self, postgres, mysql) -> None:
        stmt = select().from_("a").full_join("b", "a.id = b.id")
        assert render(stmt, postgres)[0] == 'SELECT * FROM "a" FULL JOIN "b" ON a.id = b.id'
        with pytest.raises(UnsupportedFeature):
            render(stmt, mysql)

    def test_right_join(self, sqlite) -> None:
        stmt = select().from_("a").right_join("b", eq("b.x", 1))
        assert render(stmt, sqlite)[0] == 'SELECT * FROM "a" RIGHT JOIN "b" ON "b"."x" = ?'

    def test_subquery_source(self, postgres) -> None:
        inner = select("id").from_("t").where(gt("n", 5))
        stmt = select("s.id").from_(inner, "s").where(eq("s.id", 1))
        sql, params = render(stmt, postgres)
        assert sql == (
            'SELECT s.id FROM (SELECT id FROM "t" WHERE ("n" > $1)) AS "s" WHERE ("s"."id" = $2)'
        )
        assert params == [5, 1]

    def test_subquery_source_requires_alias(self, mysql) -> None:
        with pytest.raises(MissingAlias):
            render(select().from_(select("id").from_("t")), mysql)

    def test_union_source_requires_alias(self, postgres) -> None:
        source = union(select("a").from_("x"), select("a").from_("y"))
        with pytest.raises(MissingAlias) as exc_info:
            render(select().from_(source), postgres)
        assert exc_info.value.context == "FROM"

    def test_join_subquery_requires_alias(self, mysql) -> None:
        stmt = select().from_("users").join(select("user_id").from_("orders"), "1 = 1")
        with pytest.raises(MissingAlias) as exc_info:
            render(stmt, mysql)
        assert exc_info.value.context == "JOIN"

    def test_aliased_source_cannot_be_aliased_again(self) -> None:
        sub = select("v").from_("a").as_("x")
        with pytest.raises(ArgumentError):
            select().from_(sub, alias="y")
        with pytest.raises(ArgumentError):
            select().from_("t").join(sub, "x.v = t.v", alias="y")

    def test_aliased_source_in_from(self, sqlite) -> None:
        stmt = select("x.v").from_(select("v").from_("a").as_("x"))
        assert render(stmt, sqlite)[0] == 'SELECT x.v FROM (SELECT v FROM "a") AS "x"'

    def test_aliased_subquery_join(self, mysql) -> None:
        sub = select("user_id").from_("orders").as_("o")
        stmt = select().from_("users").join(sub, "o.user_id = users.id")
        assert render(stmt, mysql)[0] == (
            "SELECT * FROM `users` INNER JOIN (SELECT user_id FROM `orders`) AS `o`"
            " ON o.user_id = users.id"
        )

    def test_subquery_in_column(self, mysql) -> None:
        sub = select("COUNT(*)").from_("orders").where("orders.user_id = users.id")
        stmt = select("id", sub).from_("users")
        assert render(stmt, mysql)[0] == (
            "SELECT id, (SELECT COUNT(*) FROM `orders` WHERE (orders.user_id = users.id))"
            " FROM `users`"
        )

    def test_sourceless(self, postgres, mysql) -> None:
        assert render(select(expr("1 + ?", 1)), postgres) == ("SELECT 1 + $1", [1])
        with pytest.raises(MissingFromClause) as exc_info:
            render(select("1"), mysql)
        assert exc_info.value.code == "missing_from"

    def test_offset_without_limit(self, postgres, mysql) -> None:
        stmt = select().from_("t").offset(5)
        assert render(stmt, postgres)[0] == 'SELECT * FROM "t" OFFSET 5'
        with pytest.raises(UnsupportedFeature):
            render(stmt, mysql)

    @pytest.mark.parametrize("bad", [-1, True, "10", 1.5])
    def test_limit_validation(self, bad) -> None:
        with pytest.raises(ArgumentError):
            select().limit(bad)

    def test_rejects_bad_column(self) -> None:
        with pytest.raises(UnsupportedType):
            select(42)  # type: ignore[arg-type]

    def test_rejects_bad_source(self) -> None:
        with pytest.raises(UnsupportedType):
            select().from_(3.5)  # type: ignore[arg-type]


class TestImmutability:
    def test_extending_leaves_base_unchanged(self, mysql) -> None:
        base = select("id").from_("users")
        narrowed = base.where(eq("active", True))
        limited = base.limit(1)
        assert render(base, mysql)[0] == "SELECT id FROM `users`"
        assert render(narrowed, mysql)[0] == "SELECT id FROM `users` WHERE (`active` = ?)"
        assert render(limited, mysql)[0] == "SELECT id FROM `users` LIMIT 1"

    def test_render_is_repeatable(self, postgres) -> None:
        stmt = select().from_("t").where(eq("a", [1, 2])).where(eq("b", "x"))
        assert render(stmt, postgres) == render(stmt, postgres)

    def test_frozen(self) -> None:
        stmt = select().from_("t")
        with pytest.raises(AttributeError):
            stmt.limit_count = 3  # type: ignore[misc]

    def test_concurrent_render(self, postgres) -> None:
        stmt = select("id").from_("t").where(eq("id", [1, 2, 3])).limit(3)
        expected = render(stmt, postgres)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: render(stmt, postgres), range(64)))
        assert all(r == expected for r in results)


class TestUnion:
    def test_union(self, mysql) -> None:
        stmt = union(select("a").from_("x"), select("a").from_("y").where(eq("b", 1)))
        sql, params = render(stmt, mysql)
        assert sql == "SELECT a FROM `x` UNION SELECT a FROM `y` WHERE (`b` = ?)"
        assert params == [1]

    def test_union_all_numbering(self, postgres) -> None:
        stmt = union_all(
            select("a").from_("x").where(eq("a", 1)),
            select("a").from_("y").where(eq("a", 2)),
        )
        assert render(stmt, postgres) == (
            'SELECT a FROM "x" WHERE ("a" = $1) UNION ALL SELECT a FROM "y" WHERE ("a" = $2)',
            [1, 2],
        )

    def test_union_as_source(self, sqlite) -> None:
        stmt = select("u.a").from_(union(select("a").from_("x"), select("a").from_("y")), "u")
        assert render(stmt, sqlite)[0] == (
            'SELECT u.a FROM (SELECT a FROM "x" UNION SELECT a FROM "y") AS "u"'
        )

    def test_empty_union(self, mysql) -> None:
        with pytest.raises(MissingMembers):
            render(union(), mysql)


class TestUnionGrouping:
    @pytest.fixture
    def values_db(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(":memory:")
        conn.executescript(
            """
            CREATE TABLE a (v INTEGER);
            CREATE TABLE b (v INTEGER);
            CREATE TABLE c (v INTEGER);
            INSERT INTO a VALUES (1), (1);
            INSERT INTO b VALUES (2);
            INSERT INTO c VALUES (3);
            """
        )
        try:
            yield conn
        finally:
            conn.close()

    @pytest.fixture
    def nested(self):
        return union_all(
            select("v").from_("a"),
            union(select("v").from_("b"), select("v").from_("c")),
        )

    @pytest.fixture
    def limited(self):
        return union(select("v").from_("a").limit(1), select("v").from_("b"))

    def test_nested_union_parenthesized(self, nested, postgres) -> None:
        assert render(nested, postgres)[0] == (
            'SELECT v FROM "a" UNION ALL (SELECT v FROM "b" UNION SELECT v FROM "c")'
        )

    def test_nested_union_derived_table_on_sqlite(self, nested, sqlite, values_db) -> None:
        sql, params = render(nested, sqlite)
        assert sql == (
            'SELECT v FROM "a" UNION ALL'
            ' SELECT * FROM (SELECT v FROM "b" UNION SELECT v FROM "c") AS "_u2"'
        )
        rows = values_db.execute(sql, params).fetchall()
        assert sorted(rows) == [(1,), (1,), (2,), (3,)]

    def test_limited_member_parenthesized(self, limited, mysql) -> None:
        assert render(limited, mysql)[0] == (
            "(SELECT v FROM `a` LIMIT 1) UNION SELECT v FROM `b`"
        )

    def test_ordered_member_parenthesized(self, postgres) -> None:
        stmt = union_all(
            select("v").from_("a").order_desc("v").limit(2), select("v").from_("b")
        )
        assert render(stmt, postgres)[0] == (
            '(SELECT v FROM "a" ORDER BY v DESC LIMIT 2) UNION ALL SELECT v FROM "b"'
        )

    def test_limited_member_derived_table_on_sqlite(self, limited, sqlite, values_db) -> None:
        sql, params = render(limited, sqlite)
        assert sql == (
            'SELECT * FROM (SELECT v FROM "a" LIMIT 1) AS "_u1" UNION SELECT v FROM "b"'
        )
        rows = values_db.execute(sql, params).fetchall()
        assert sorted(rows) == [(1,), (2,)]

    def test_plain_members_stay_bare(self, sqlite) -> None:
        stmt = union(select("v").from_("a").where(eq("v", 1)), select("v").from_("b"))
        assert render(stmt, sqlite)[0] == (
            'SELECT v FROM "a" WHERE ("v" = ?) UNION SELECT v FROM "b"'
        )


@dataclass
class Person:
    id: int
    name: str
    email: str | None = field(default=None, metadata={"db": "email"})
    cache_key: str = field(default="", metadata={"db": "-"})


class TestInsert:
    def test_values_rows(self, postgres) -> None:
        stmt = insert_into("t").columns("a", "b").values(1, 2).values(3, 4)
        assert render(stmt, postgres) == (
            'INSERT INTO "t" ("a", "b") VALUES ($1, $2), ($3, $4)',
            [1, 2, 3, 4],
        )

    def test_interpolated(self, mysql) -> None:
        stmt = insert_into("t").columns("name").values("O'Brien")
        assert render(stmt, mysql, interpolate=True)[0] == (
            "INSERT INTO `t` (`name`) VALUES ('O\\'Brien')"
        )

    def test_record(self, mysql) -> None:
        stmt = insert_into("dbr_people").record(Person(1, "Ann", "ann@example.com"))
        assert render(stmt, mysql) == (
            "INSERT INTO `dbr_people` (`id`, `name`, `email`) VALUES (?, ?, ?)",
            [1, "Ann", "ann@example.com"],
        )

    def test_record_picks_listed_columns(self, mysql) -> None:
        stmt = insert_into("dbr_people").columns("name", "id").record(Person(2, "Bo"))
        assert render(stmt, mysql) == (
            "INSERT INTO `dbr_people` (`name`, `id`) VALUES (?, ?)",
            ["Bo", 2],
        )

    def test_record_missing_column(self) -> None:
        with pytest.raises(ArgumentError):
            insert_into("dbr_people").columns("nickname").record(Person(3, "Cy"))

    def test_row_width_mismatch(self, mysql) -> None:
        stmt = insert_into("t").columns("a", "b").values(1)
        with pytest.raises(ArgumentCountMismatch):
            render(stmt, mysql)

    def test_from_select(self, mysql) -> None:
        stmt = insert_into("archive").columns("id").from_select(
            select("id").from_("t").where(eq("old", True))
        )
        assert render(stmt, mysql) == (
            "INSERT INTO `archive` (`id`) SELECT id FROM `t` WHERE (`old` = ?)",
            [True],
        )

    def test_structural_errors(self, mysql) -> None:
        with pytest.raises(MissingTable):
            render(insert_into("").values(1), mysql)
        with pytest.raises(MissingValues):
            render(insert_into("t").columns("a"), mysql)
        both = insert_into("t").values(1).from_select(select("a").from_("x"))
        with pytest.raises(StructuralError):
            render(both, mysql)


class TestUpsert:
    @pytest.fixture
    def stmt(self):
        return (
            insert_into("dbr_people")
            .columns("id", "name")
            .values(1, "Ann")
            .on_conflict("id")
            .do_update("name")
        )

    def test_mysql(self, stmt, mysql) -> None:
        assert render(stmt, mysql)[0] == (
            "INSERT INTO `dbr_people` (`id`, `name`) VALUES (?, ?)"
            " ON DUPLICATE KEY UPDATE `name` = VALUES(`name`)"
        )

    def test_postgres(self, stmt, postgres) -> None:
        assert render(stmt, postgres)[0] == (
            'INSERT INTO "dbr_people" ("id", "name") VALUES ($1, $2)'
            ' ON CONFLICT ("id") DO UPDATE SET "name" = EXCLUDED."name"'
        )

    def test_sqlite(self, stmt, sqlite) -> None:
        assert render(stmt, sqlite)[0] == (
            'INSERT INTO "dbr_people" ("id", "name") VALUES (?, ?)'
            ' ON CONFLICT ("id") DO UPDATE SET "name" = excluded."name"'
        )

    def test_clickhouse_unsupported(self, stmt, clickhouse) -> None:
        with pytest.raises(UnsupportedFeature) as exc_info:
            render(stmt, clickhouse, interpolate=True)
        assert exc_info.value.feature == "upsert"

    def test_explicit_value(self, postgres) -> None:
        stmt = (
            insert_into("counters")
            .columns("k", "n")
            .values("a", 1)
            .on_conflict("k")
            .do_update_set("n", expr("counters.n + ?", 1))
        )
        assert render(stmt, postgres) == (
            'INSERT INTO "counters" ("k", "n") VALUES ($1, $2)'
            ' ON CONFLICT ("k") DO UPDATE SET "n" = counters.n + $3',
            ["a", 1, 1],
        )

    def test_do_nothing(self, postgres, mysql) -> None:
        stmt = insert_into("t").columns("a").values(1).on_conflict().do_nothing()
        assert render(stmt, postgres)[0] == (
            'INSERT INTO "t" ("a") VALUES ($1) ON CONFLICT DO NOTHING'
        )
        with pytest.raises(UnsupportedFeature):
            render(stmt, mysql)

    def test_missing_target(self, postgres) -> None:
        stmt = insert_into("t").columns("a").values(1).do_update("a")
        with pytest.raises(MissingConflictTarget):
            render(stmt, postgres)

    def test_missing_actions(self, postgres) -> None:
        stmt = insert_into("t").columns("a").values(1).on_conflict("a")
        with pytest.raises(NoAssignments):
            render(stmt, postgres)


@dataclass
class Thing:
    A: int


class TestUpdate:
    def test_set_and_where(self, mysql) -> None:
        stmt = update("table").set("a", 1).where(eq("b", 2))
        assert render(stmt, mysql) == ("UPDATE `table` SET `a` = ? WHERE (`b` = ?)", [1, 2])

    def test_set_record(self, mysql) -> None:
        stmt = update("table").set_record(Thing(A=1)).where(eq("b", 2))
        assert render(stmt, mysql) == ("UPDATE `table` SET `a` = ? WHERE (`b` = ?)", [1, 2])

    def test_set_map_interpolated(self, postgres) -> None:
        stmt = update("t").set_map({"a": 1, "b": None}).where(and_(eq("id", 3), eq("x", None)))
        assert render(stmt, postgres, interpolate=True) == (
            'UPDATE "t" SET "a" = 1, "b" = NULL WHERE (("id" = 3) AND ("x" IS NULL))',
            [],
        )

    def test_expression_value(self, mysql) -> None:
        stmt = update("t").set("n", expr("n + ?", 1))
        assert render(stmt, mysql) == ("UPDATE `t` SET `n` = n + ?", [1])

    def test_returning(self, postgres, mysql) -> None:
        stmt = update("t").set("a", 1).returning("id", "a")
        assert render(stmt, postgres)[0] == 'UPDATE "t" SET "a" = $1 RETURNING "id", "a"'
        with pytest.raises(UnsupportedFeature):
            render(stmt, mysql)

    def test_no_assignments(self, mysql) -> None:
        with pytest.raises(NoAssignments):
            render(update("t").where(eq("a", 1)), mysql)


class TestDelete:
    def test_delete(self, mysql) -> None:
        stmt = delete_from("dbr_people").where(eq("id", 1))
        assert render(stmt, mysql) == ("DELETE FROM `dbr_people` WHERE (`id` = ?)", [1])

    def test_delete_all(self, sqlite) -> None:
        assert render(delete_from("t"), sqlite) == ('DELETE FROM "t"', [])

    def test_returning(self, sqlite) -> None:
        stmt = delete_from("t").where("id IN ?", [1, 2]).returning("id")
        assert render(stmt, sqlite) == (
            'DELETE FROM "t" WHERE (id IN (?, ?)) RETURNING "id"',
            [1, 2],
        )

    def test_missing_table(self, mysql) -> None:
        with pytest.raises(MissingTable):
            render(delete_from(""), mysql)
