# himorm

A fluent SQL query builder for MySQL with a small data-access layer on top:
named connections with a connection pool, chained `SELECT` / `INSERT` /
`UPDATE` / `DELETE` builders, grouped `WHERE` clauses, `CASE ... WHEN`
expressions, pagination with optional column sums, and transactions.

Statements are built with `?` placeholders and a separate list of
arguments. Every builder has `to_sql()`, which returns `(sql, args)`
without touching the database.

## Installing

```
pip install .
pip install ".[test]"   # with pytest, to run the tests
```

## Configuring a connection

Connections are registered under a name (`himorm.config`,
`himorm.connection`). The name `"Default"` (`DEFAULT_CONNECT`) is used
when a builder is not given one.

```python
from himorm.config import db_config

password = "password"
session = db_config(
    "Default",
    host="localhost",
    port="3306",
    database="test",
    username="user",
    password=password,
    charset="utf8mb4",
    max_idle=5,
    max_open=10,
    max_lifetime=1000,
    log_mode="Info",
    slow_threshold=1,
).init()
```

`DBConfig.init()` opens one connection to check the settings and registers
the connection; it returns its `Session`. An empty name raises
`ConnectError`. Initialising a name that is already registered returns the
existing session unchanged.

`log_mode` is one of `Silent`, `Error`, `Warn` or `Info`
(`himorm.log_level.log_level` looks it up); any other value raises
`ValueError`. Statements are logged through the standard `logging` logger
named `"himorm"`: failures at `Error` and above, statements slower than
`slow_threshold` seconds (3 when unset) at `Warn` and above, every statement
at `Info`. `colorful=True` adds terminal colours to those lines.

`get_connect(name)` returns the registered `Connect` (settings and
session) and raises `ConnectError("connect nonexistent")` for an unknown
name; `gorm(name)` and `default()` return just the session.

A `Session` can also be used directly: `query(sql, args)` returns rows as
dictionaries, `execute(sql, args)` returns `(last_insert_id,
rows_affected)`.

## Querying

```python
from himorm.db import db_connect

db = db_connect("Default")

sql, args = (
    db.query()
    .select("user_id", "user_name")
    .from_("users")
    .where("user_id", "=", 4)
    .to_sql()
)
# SELECT user_id, user_name FROM users WHERE (user_id = ?)
# args: [4]
```

`select()` with no columns selects `*`; `db.query().distinct().select(...)`
adds `DISTINCT`. `db.query().raw(sql, *args).get()` runs a raw query.

Conditions are chained with `where`, `where_in`, `where_not_in`,
`where_null`, `where_not_null`, `where_like`, `not_like`,
`where_between` and their `or_` counterparts (`or_where`, `or_where_in`,
`or_like`, `or_not_like`, ...). `where` takes an operator: `=`, `>`, `>=`,
`<`, `<=`, `<>`/`!=`; a value made with `himorm.expression.expr` is placed
into the SQL as is. Nested groups are built with `where_raw` /
`or_where_raw`, which take a function receiving a fresh `WhereRawBuilder`:

```python
sql, args = (
    db.query()
    .select("*")
    .from_("users")
    .where("user_id", "=", 4)
    .or_where_raw(lambda b: b.where_in("user_id", [2, 3]).or_where("user_id", "=", 1))
    .to_sql()
)
# SELECT * FROM users WHERE (user_id = ?) OR ((user_id IN (?,?)) OR (user_id = ?))
# args: [4, 2, 3, 1]
```

`SelectBuilder` also offers `join`, `left_join`, `right_join`,
`inner_join`, `group_by`, `having`, `order_by`, `limit`, `offset`,
`column` and `distinct`, and runs with:

- `get()` – all rows as a list of dictionaries;
- `first()` – the first row, or `None`;
- `count()` – the number of matching rows (or groups, when grouped);
- `sum("a")` – the sum of one column as text; `sum("a", "b")` – a row with
  the keys `sum_0`, `sum_1`, ...;
- `paginate(page, per_page, dest=None)` – a `Paginate` with `total`,
  `per_page`, `current_page`, `last_page` and `items`. `dest` may be a
  `Paginate` to fill, a list that receives the rows, or a
  `PaginateSum(dest, "col", ...)`, whose `sum` is filled with the sums of
  the given columns. When nothing matches, `items` is left as given.

## Writing

```python
db.insert().into("users").columns("user_name", "day").values("ghgh", "2023-09-20").save()

new_id = db.insert().into("users").set("user_name", "insert23").last_insert_id()

db.update().table("users").set("user_name", "user_6").where("user_id", "=", 5).exec()

db.delete().from_("users").where("user_id", "=", 1).exec()
```

`save()` and `exec()` return the number of affected rows,
`last_insert_id()` the id of the inserted row. `ValuesBuilder.values` may
be called several times for a multi-row insert, and
`on_duplicate_key_update("updateTime = VALUES(updateTime)")` appends an
`ON DUPLICATE KEY UPDATE` clause.

`UpdateBuilder.set` accepts a `CaseBuilder` made with
`himorm.case_when.case`; the column is quoted with backticks:

```python
from himorm.case_when import case

db.update().table("school").set(
    "ip", case("schoolId").when(21, 21).when(22, 22).else_("'w'")
).where_in("schoolId", [21, 22]).to_sql()
# UPDATE school SET `ip` = CASE schoolId WHEN 21 THEN 21 WHEN 22 THEN 22 ELSE 'w' END
#   WHERE (schoolId IN (?,?))
```

`UpdateBuilder` also has `set_map`, `case_when`, `prefix`, `suffix`,
`from_`, `order_by`, `limit` and `offset`.

## Transactions

`DB.begin()` starts a transaction and returns a `Transaction` whose
`insert`, `update`, `delete` and `raw` builders all run on it; statements
started from the same `DB` afterwards run on it too. It is finished with
`transaction.session.commit()` or `transaction.session.rollback()`.
`DB.tx(session)` joins a transaction session that is already started.

`Session.begin()` returns a transaction session that can be used as a
context manager (commit on normal exit, rollback on an exception), and
`TX(session).transaction(fn)` / `Session.transaction(fn)` runs `fn` with a
transaction session, committing when it returns and rolling back and
re-raising when it raises; inside a running transaction a savepoint is used.

## What it does not do

- It speaks to MySQL only, through `pymysql`; there is no other driver.
- It has no model or entity classes, no table-to-class mapping and no code
  generation: results are plain dictionaries.
- It has no hooks or callbacks around statements; the only record of what
  runs is the `"himorm"` log.
- It has no command-line interface.