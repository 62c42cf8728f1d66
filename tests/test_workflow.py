from dataclasses import dataclass

import pytest

from condoadmin.app.models import CondominioDraft, UsuarioDraft
from condoadmin.app.validators import validate_condominio, validate_usuario
from condoadmin.core import (
    EditWorkflow,
    RecordCollection,
    ValidationError,
    WorkflowMode,
    WorkflowState,
)


@dataclass
class Note:
    id: int = 0
    title: str = ""


class NoteService:
    def __init__(self):
        self.records = {}
        self.calls = []
        self.fail_with = None

    def create(self, data):
        self.calls.append(("create", data))
        if self.fail_with is not None:
            raise self.fail_with
        record = Note(id=len(self.records) + 1, title=data.title.strip())
        self.records[record.id] = record
        return record

    def update(self, record_id, data):
        self.calls.append(("update", record_id, data))
        if self.fail_with is not None:
            raise self.fail_with
        record = Note(id=record_id, title=data.title.strip())
        self.records[record_id] = record
        return record

    def delete(self, record_id):
        self.records.pop(record_id, None)

    def list(self):
        return list(self.records.values())


def _require_title(draft):
    if not draft.title.strip():
        return "Título é obrigatório"
    return None


def _workflow(service, runner, collection=None, **kwargs):
    results = []

    def _on_result(result):
        results.append(result)
        if collection is not None and result.ok:
            collection.merge(result.record)

    workflow = EditWorkflow(
        service,
        validator=_require_title,
        runner=runner,
        on_result=_on_result,
        **kwargs,
    )
    return workflow, results


def test_invalid_draft_never_reaches_service(manual_runner):
    service = NoteService()
    workflow, results = _workflow(service, manual_runner)
    workflow.open(Note(), WorkflowMode.CREATE)

    assert workflow.submit() is False

    assert service.calls == []
    assert manual_runner.pending == []
    assert workflow.error == "Título é obrigatório"
    assert workflow.state is WorkflowState.EDITING
    assert results[-1].validation is True


def test_validation_reruns_on_every_submit(manual_runner):
    service = NoteService()
    workflow, _results = _workflow(service, manual_runner)
    workflow.open(Note(), WorkflowMode.CREATE)
    workflow.submit()
    assert workflow.error == "Título é obrigatório"

    workflow.update_draft(title="Assembleia")
    assert workflow.submit() is True
    assert workflow.error is None
    assert workflow.state is WorkflowState.SAVING


def test_create_success_appends_one_record_and_closes(manual_runner):
    service = NoteService()
    collection = RecordCollection()
    workflow, results = _workflow(service, manual_runner, collection)
    workflow.open(Note(), WorkflowMode.CREATE)
    workflow.update_draft(title="Assembleia")
    workflow.submit()

    assert workflow.busy is True
    manual_runner.run_all()

    assert workflow.state is WorkflowState.CLOSED
    assert workflow.draft is None
    assert workflow.error is None
    assert [record.id for record in collection] == [1]
    assert results[-1].ok
    assert results[-1].mode is WorkflowMode.CREATE


def test_edit_success_replaces_record_without_duplicates(manual_runner):
    service = NoteService()
    original = service.create(Note(title="Antigo"))
    collection = RecordCollection([original, Note(id=2, title="Outro")])
    workflow, _results = _workflow(service, manual_runner, collection)

    workflow.open(Note(id=original.id, title=original.title), WorkflowMode.EDIT)
    workflow.update_draft(title="Novo")
    workflow.submit()
    manual_runner.run_all()

    assert service.calls[-1][0] == "update"
    assert service.calls[-1][1] == original.id
    matching = [record for record in collection if record.id == original.id]
    assert len(matching) == 1
    assert matching[0].title == "Novo"
    assert len(collection) == 2


def test_service_failure_keeps_dialog_open_with_message(manual_runner):
    service = NoteService()
    service.fail_with = ValidationError("Já existe uma nota com esse título")
    collection = RecordCollection()
    workflow, results = _workflow(service, manual_runner, collection)
    workflow.open(Note(), WorkflowMode.CREATE)
    workflow.update_draft(title="Duplicada")
    workflow.submit()
    manual_runner.run_all()

    assert workflow.state is WorkflowState.EDITING
    assert workflow.busy is False
    assert workflow.error == "Já existe uma nota com esse título"
    assert workflow.draft.title == "Duplicada"
    assert len(collection) == 0
    assert results[-1].error == "Já existe uma nota com esse título"


def test_open_twice_leaves_draft_equal_to_initial_data(manual_runner):
    workflow, _results = _workflow(NoteService(), manual_runner)
    initial = Note(id=3, title="Reunião")

    workflow.open(initial, WorkflowMode.EDIT)
    workflow.open(initial, WorkflowMode.EDIT)

    assert workflow.draft == initial
    assert workflow.draft is not initial


def test_draft_edits_do_not_touch_initial_data(manual_runner):
    workflow, _results = _workflow(NoteService(), manual_runner)
    initial = Note(id=3, title="Reunião")
    workflow.open(initial, WorkflowMode.EDIT)

    workflow.update_draft({"title": "Alterada"})

    assert initial.title == "Reunião"
    assert workflow.draft.title == "Alterada"


def test_submit_and_cancel_are_ignored_while_busy(manual_runner):
    service = NoteService()
    workflow, _results = _workflow(service, manual_runner)
    workflow.open(Note(title="Assembleia"), WorkflowMode.CREATE)
    workflow.submit()

    assert workflow.submit() is False
    assert workflow.cancel() is False
    workflow.update_draft(title="Ignorado")
    assert len(manual_runner.pending) == 1

    manual_runner.run_all()
    assert service.calls[0][1].title == "Assembleia"


def test_cancel_discards_draft_without_service_call(manual_runner):
    service = NoteService()
    workflow, _results = _workflow(service, manual_runner)
    workflow.open(Note(title="Rascunho"), WorkflowMode.CREATE)

    assert workflow.cancel() is True

    assert workflow.is_open is False
    assert workflow.draft is None
    assert service.calls == []


def test_close_during_save_makes_result_stale(manual_runner):
    service = NoteService()
    collection = RecordCollection()
    workflow, results = _workflow(service, manual_runner, collection)
    workflow.open(Note(title="Assembleia"), WorkflowMode.CREATE)
    workflow.submit()

    workflow.close()
    manual_runner.run_all()

    assert len(service.calls) == 1
    assert len(collection) == 0
    assert workflow.error is None
    assert workflow.is_open is False
    assert results == []


def test_stale_failure_does_not_leak_into_reopened_dialog(manual_runner):
    service = NoteService()
    service.fail_with = ValidationError("Falhou")
    workflow, _results = _workflow(service, manual_runner)
    workflow.open(Note(title="Primeira"), WorkflowMode.CREATE)
    workflow.submit()

    workflow.open(Note(title="Segunda"), WorkflowMode.CREATE)
    manual_runner.run_all()

    assert workflow.state is WorkflowState.EDITING
    assert workflow.error is None
    assert workflow.draft.title == "Segunda"


def test_confirmation_required_defers_service_call(manual_runner):
    service = NoteService()
    workflow, _results = _workflow(service, manual_runner, require_confirmation=True)
    workflow.open(Note(title="Assembleia"), WorkflowMode.CREATE)

    assert workflow.submit() is True

    assert service.calls == []
    assert manual_runner.pending == []
    assert workflow.state is WorkflowState.CONFIRMING
    assert workflow.gate.is_open


def test_confirmation_cancel_returns_to_editing_with_draft_intact(manual_runner):
    service = NoteService()
    workflow, _results = _workflow(service, manual_runner, require_confirmation=True)
    workflow.open(Note(title="Assembleia"), WorkflowMode.CREATE)
    workflow.submit()

    workflow.gate.cancel()

    assert workflow.state is WorkflowState.EDITING
    assert workflow.draft.title == "Assembleia"
    assert workflow.error is None
    assert service.calls == []


def test_confirmed_save_runs_once_and_closes(manual_runner):
    service = NoteService()
    collection = RecordCollection()
    workflow, _results = _workflow(service, manual_runner, collection, require_confirmation=True)
    workflow.open(Note(title="Assembleia"), WorkflowMode.CREATE)
    workflow.submit()

    workflow.gate.confirm()
    assert workflow.busy is True
    assert workflow.gate.confirm() is False
    manual_runner.run_all()

    assert len(service.calls) == 1
    assert workflow.is_open is False
    assert workflow.gate.is_open is False
    assert len(collection) == 1


def test_confirmed_failure_keeps_gate_open_for_retry(manual_runner):
    service = NoteService()
    service.fail_with = ValidationError("Servidor indisponível")
    workflow, _results = _workflow(service, manual_runner, require_confirmation=True)
    workflow.open(Note(title="Assembleia"), WorkflowMode.CREATE)
    workflow.submit()
    workflow.gate.confirm()
    manual_runner.run_all()

    assert workflow.gate.is_open
    assert workflow.gate.error == "Servidor indisponível"
    assert workflow.error == "Servidor indisponível"
    assert workflow.busy is False

    service.fail_with = None
    workflow.gate.confirm()
    manual_runner.run_all()
    assert workflow.is_open is False


def test_condominio_with_blank_name_is_rejected_before_service(condominio_service, backend, manual_runner):
    workflow = EditWorkflow(condominio_service, validator=validate_condominio, runner=manual_runner)
    workflow.open(CondominioDraft(nome_condominio="", cidade_condominio="SP", uf_condominio="SP"), WorkflowMode.CREATE)

    workflow.submit()

    assert workflow.error == "Nome do condomínio é obrigatório"
    assert backend.calls == []


def test_condominio_create_normalises_uf(condominio_service, backend, manual_runner):
    collection = RecordCollection()
    workflow = EditWorkflow(
        condominio_service,
        validator=validate_condominio,
        require_confirmation=False,
        runner=manual_runner,
        on_result=lambda result: collection.merge(result.record) if result.ok else None,
    )
    workflow.open(
        CondominioDraft(nome_condominio="Edificio A", cidade_condominio="Curitiba", uf_condominio="pr"),
        WorkflowMode.CREATE,
    )

    workflow.submit()
    manual_runner.run_all()

    inserted = backend.calls_to("insert")
    assert len(inserted) == 1
    assert inserted[0][2]["row"]["uf_condominio"] == "PR"
    assert len(collection) == 1
    assert collection.records()[0].uf_condominio == "PR"


def test_usuario_password_change_without_current_password_is_rejected(usuario_service, backend, manual_runner):
    workflow = EditWorkflow(
        usuario_service,
        validator=validate_usuario,
        require_confirmation=True,
        runner=manual_runner,
    )
    workflow.open(UsuarioDraft(id=7, senha="newpass", senha_atual=""), WorkflowMode.EDIT)

    workflow.submit()

    assert workflow.error == "Senha atual é obrigatória para alterar a senha"
    assert workflow.gate.is_open is False
    assert backend.calls == []


@pytest.mark.parametrize("mode", [WorkflowMode.CREATE, WorkflowMode.EDIT])
def test_workflow_works_with_mapping_drafts(manual_runner, mode):
    calls = []

    class MappingService:
        def create(self, data):
            calls.append(("create", dict(data)))
            return {"id": 10, **data}

        def update(self, record_id, data):
            calls.append(("update", record_id))
            return dict(data)

    workflow = EditWorkflow(MappingService(), runner=manual_runner)
    workflow.open({"id": 10, "title": "x"}, mode)
    workflow.update_draft(title="y")
    workflow.submit()
    manual_runner.run_all()

    assert calls[0][0] == mode.value
    assert workflow.is_open is False
