import os
import shutil
import tempfile
import unittest

from shard_core.errors import FieldTypeError
from shard_core.ordering import chain, field_order, order_by, sort_key, with_tiebreak
from shard_core.records import FieldKind, Record, projection
from shard_core.sources import PEOPLE_COLUMNS, ColumnSpec, CsvRecordSource


class TestFieldKind(unittest.TestCase):
    def test_classification(self):
        self.assertIs(FieldKind.of(True), FieldKind.BOOL)
        self.assertIs(FieldKind.of(42), FieldKind.INT)
        self.assertIs(FieldKind.of(2 ** 31), FieldKind.INT64)
        self.assertIs(FieldKind.of(-(2 ** 31)), FieldKind.INT)
        self.assertIs(FieldKind.of("x"), FieldKind.TEXT)
        self.assertIs(FieldKind.of(None), FieldKind.ABSENT)

    def test_unsupported_values(self):
        with self.assertRaises(FieldTypeError):
            FieldKind.of(1.5)
        with self.assertRaises(FieldTypeError):
            FieldKind.of(2 ** 63)


class TestRecord(unittest.TestCase):
    def setUp(self):
        self.person = Record(id=7_000_000_000, firstName="Ana", age=34, active=True)

    def test_is_read_only(self):
        with self.assertRaises(TypeError):
            self.person["age"] = 35

    def test_rejects_unsupported_values_at_construction(self):
        with self.assertRaises(FieldTypeError):
            Record(score=0.5)

    def test_typed_accessors(self):
        self.assertEqual(self.person.get_int("age"), 34)
        self.assertEqual(self.person.get_int64("age"), 34)
        self.assertEqual(self.person.get_int64("id"), 7_000_000_000)
        self.assertEqual(self.person.get_text("firstName"), "Ana")
        self.assertIs(self.person.get_bool("active"), True)

    def test_accessors_do_not_cast(self):
        with self.assertRaises(FieldTypeError):
            self.person.get_int("id")
        with self.assertRaises(FieldTypeError):
            self.person.get_text("age")
        with self.assertRaises(FieldTypeError):
            self.person.get_int("active")
        with self.assertRaises(FieldTypeError):
            self.person.get_int("missing")

    def test_equality_and_hashing(self):
        same = Record({"id": 7_000_000_000, "firstName": "Ana"}, age=34, active=True)
        self.assertEqual(self.person, same)
        self.assertEqual(hash(self.person), hash(same))
        self.assertEqual(self.person, same.to_dict())
        self.assertEqual(len({self.person, same}), 1)

    def test_projection(self):
        self.assertEqual(self.person.project("id", "age"), Record(id=7_000_000_000, age=34))
        self.assertEqual(projection("firstName", "nope")(self.person), Record(firstName="Ana"))


class TestOrdering(unittest.TestCase):
    def test_order_by_parses_direction(self):
        rows = [Record(id=1, age=30), Record(id=2, age=50), Record(id=3, age=30)]
        ordered = sorted(rows, key=sort_key(order_by("-age", "-id")))
        self.assertEqual([r["id"] for r in ordered], [2, 3, 1])

    def test_int_and_int64_compare(self):
        compare = field_order("id")
        self.assertLess(compare(Record(id=5), Record(id=2 ** 40)), 0)

    def test_mixed_kinds_raise(self):
        with self.assertRaises(FieldTypeError):
            field_order("id")(Record(id=1), Record(id="1"))

    def test_absent_field_raises(self):
        with self.assertRaises(FieldTypeError):
            field_order("age")(Record(id=1), Record(id=2, age=3))

    def test_chain_and_tiebreak(self):
        by_age = field_order("age")
        a, b = Record(id=1, age=30), Record(id=2, age=30)
        self.assertEqual(by_age(a, b), 0)
        self.assertLess(with_tiebreak(by_age, "id")(a, b), 0)
        self.assertEqual(chain(by_age)(a, b), 0)
        self.assertIs(with_tiebreak(by_age, None), by_age)

    def test_order_by_needs_fields(self):
        with self.assertRaises(ValueError):
            order_by()


class TestCsvRecordSource(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(content)
        return path

    def test_loads_people_file(self):
        path = self.write(
            "people.csv",
            "id,firstName,lastName,age,gender\n"
            "1000000007, Ana , Lopez,59,FEMALE\n"
            "1000000014,Hugo,Diaz,abc,MALE\n"
            "\n"
            "9000000000,Ines,,41,OTHER\n"
            "12,Short,Row\n",
        )
        source = CsvRecordSource(path)
        records = source.load()
        self.assertEqual(source.records_loaded, 2)
        self.assertEqual(source.rows_skipped, 2)
        self.assertEqual(records[0], Record(id=1000000007, firstName="Ana", lastName="Lopez", age=59, gender="FEMALE"))
        self.assertIs(records[1].kind("id"), FieldKind.INT64)
        self.assertIs(records[1].kind("lastName"), FieldKind.ABSENT)
        self.assertEqual(list(source), records)

    def test_int_column_rejects_64_bit_values(self):
        path = self.write("big.csv", "id,firstName,lastName,age,gender\n1,A,B,9999999999,MALE\n")
        source = CsvRecordSource(path)
        self.assertEqual(source.load(), [])
        self.assertEqual(source.rows_skipped, 1)

    def test_bool_columns(self):
        columns = (ColumnSpec("id", FieldKind.INT), ColumnSpec("active", FieldKind.BOOL))
        path = self.write("flags.csv", "id,active\n1,yes\n2,False\n3,maybe\n")
        records = CsvRecordSource(path, columns).load()
        self.assertEqual([r.get_bool("active") for r in records], [True, False])

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            CsvRecordSource(os.path.join(self.temp_dir, "nope.csv")).load()

    def test_people_header(self):
        self.assertEqual([c.name for c in PEOPLE_COLUMNS], ["id", "firstName", "lastName", "age", "gender"])
        self.assertIs(PEOPLE_COLUMNS[0].kind, FieldKind.INT64)


if __name__ == "__main__":
    unittest.main()
