from ripdash.data.schemas import (
    CachePack, EntryType, ParamsIndex, ParamsRow, Record, entry_type_label, infer_entry_type,
)


def test_blank_type_with_payment_note_is_payment():
    rec = Record.build(entry_type="", student_name="Ana Pérez", date_raw="05/01/2026", payment_note="20000")
    assert infer_entry_type(rec) == EntryType.PAYMENT
    assert entry_type_label(rec) == "Pago"


def test_explicit_type_wins():
    assert infer_entry_type(Record.build(entry_type="CLASE", payment_note="20000")) == EntryType.CLASS
    assert infer_entry_type(Record.build(entry_type="Pago")) == EntryType.PAYMENT
    assert infer_entry_type(Record.build(entry_type="Ajuste")) == EntryType.OTHER
    assert entry_type_label(Record.build(entry_type=" Ajuste ")) == "Ajuste"


def test_build_derives_keys():
    rec = Record.build(student_name=" Ána ", service="PIANO", teacher="Laura")
    assert (rec.student_key, rec.service_key, rec.teacher_key) == ("ana", "piano", "laura")


def test_record_dict_carries_kind_and_reloads():
    rec = Record.build(student_name="Ana", payment_note="x", amount=5.0, amount_present=True)
    data = rec.to_dict()
    assert data["kind"] == "payment"
    assert Record.from_dict(data) == rec


def test_params_index_lookup_is_normalized():
    index = ParamsIndex.from_rows([ParamsRow("José Núñez", "Activo")])
    assert index.label_for("jose nunez") == "Activo"
    assert index.label_for("nadie") == ""


def test_cache_pack_from_dict_rejects_malformed():
    assert CachePack.from_dict({"payload": {"a": 1}, "produced_at": 10}).produced_at == 10.0
    assert CachePack.from_dict(None) is None
    assert CachePack.from_dict({"payload": [], "produced_at": 10}) is None
    assert CachePack.from_dict({"payload": {}, "produced_at": "soon"}) is None
