from __future__ import annotations

from typing import Any, Callable

from condoadmin.app.models import (
    Condominio,
    CondominioDraft,
    Usuario,
    UsuarioDraft,
    access_type_label,
    format_phone,
)
from condoadmin.core.collection import RecordCollection
from condoadmin.core.errors import error_message
from condoadmin.core.workflow import WorkflowMode, WorkflowResult


_CONDOMINIO_SAVED = {
    WorkflowMode.CREATE: "Condomínio criado com sucesso!",
    WorkflowMode.EDIT: "Condomínio atualizado com sucesso!",
}
_USUARIO_SAVED = {
    WorkflowMode.CREATE: "Usuário criado com sucesso!",
    WorkflowMode.EDIT: "Usuário atualizado com sucesso!",
}


def condominio_search_keys(record: Condominio) -> tuple[str | None, ...]:
    return (
        record.nome_condominio,
        record.cidade_condominio,
        record.uf_condominio,
        record.tipo_condominio,
        record.endereco_condominio,
    )


def usuario_search_keys(record: Usuario) -> tuple[str | None, ...]:
    return (
        record.nome,
        record.email,
        record.telefone,
        format_phone(record.telefone),
        access_type_label(record.tipo_acesso),
    )


class WindowEntityActionsMixin:
    # -------------------------------------------------------------- loading

    def reload_all(self) -> None:
        self._reload_condominios()
        self._reload_usuarios()
        self._refresh_access()

    def _reload_condominios(self) -> None:
        self._load_into(
            self._condominio_service.list,
            self._condominios,
            self._refresh_condominio_view,
            "Erro ao carregar condomínios",
        )

    def _reload_usuarios(self) -> None:
        self._load_into(
            self._usuario_service.list,
            self._usuarios,
            self._refresh_usuario_view,
            "Erro ao carregar usuários",
        )

    def _load_into(
        self,
        job: Callable[[], Any],
        collection: RecordCollection[Any],
        refresh: Callable[[], None],
        failure_message: str,
    ) -> None:
        def _loaded(records: Any) -> None:
            collection.replace_all(records)
            refresh()

        def _failed(exc: BaseException) -> None:
            self._logger.error("%s: %s", failure_message, exc)
            self._set_status(f"{failure_message}: {error_message(exc)}", kind="error")

        self._runner.submit(job, on_success=_loaded, on_error=_failed)

    def _refresh_access(self) -> None:
        def _resolved(access_type: str) -> None:
            self._is_admin = access_type == "admin"
            self._session_label.setText(
                f"{self._session_email} · {access_type_label(access_type)}"
            )
            self._usuario_panel.set_actions_enabled(
                create=self._is_admin,
                edit=self._is_admin,
                delete=self._is_admin,
            )

        self._runner.submit(
            self._usuario_service.current_access_type,
            on_success=_resolved,
            on_error=lambda exc: _resolved("usuario"),
        )

    def _refresh_condominio_view(self) -> None:
        rows = self._condominios.filtered(self._condominio_panel.search_text, condominio_search_keys)
        self._condominio_panel.set_records(rows)

    def _refresh_usuario_view(self) -> None:
        rows = self._usuarios.filtered(self._usuario_panel.search_text, usuario_search_keys)
        self._usuario_panel.set_records(rows)

    # ----------------------------------------------------------- condominio

    def _open_create_condominio(self) -> None:
        self._condominio_workflow.open(CondominioDraft(), WorkflowMode.CREATE)

    def _open_edit_condominio(self, record: Condominio) -> None:
        self._condominio_workflow.open(record.to_draft(), WorkflowMode.EDIT)

    def _on_condominio_result(self, result: WorkflowResult[Condominio]) -> None:
        if result.validation:
            return
        if not result.ok or result.record is None:
            self._set_status(result.error or "Erro ao salvar condomínio", kind="error")
            return
        self._condominios.merge(result.record)
        self._refresh_condominio_view()
        self._set_status(_CONDOMINIO_SAVED[result.mode])

    def _request_delete_condominio(self, record: Condominio) -> None:
        self._delete_gate.request(
            lambda: self._condominio_service.delete(record.id),
            title="Excluir Condomínio",
            message=f"Deseja excluir o condomínio '{record.nome_condominio}'? Esta ação não pode ser desfeita.",
            confirm_text="Excluir",
            danger=True,
            on_success=lambda _result: self._condominio_deleted(record.id),
        )

    def _condominio_deleted(self, record_id: int) -> None:
        self._condominios.remove(record_id)
        self._refresh_condominio_view()
        self._set_status("Condomínio excluído com sucesso!")

    # -------------------------------------------------------------- usuario

    def _open_create_usuario(self) -> None:
        if not self._is_admin:
            return
        self._usuario_workflow.open(UsuarioDraft(), WorkflowMode.CREATE)

    def _open_edit_usuario(self, record: Usuario) -> None:
        if not self._is_admin:
            return
        self._usuario_workflow.open(record.to_draft(), WorkflowMode.EDIT)

    def _on_usuario_result(self, result: WorkflowResult[Usuario]) -> None:
        if result.validation:
            return
        if not result.ok or result.record is None:
            self._set_status(result.error or "Erro ao salvar usuário", kind="error")
            return
        self._usuarios.merge(result.record)
        self._refresh_usuario_view()
        self._set_status(_USUARIO_SAVED[result.mode])

    def _request_delete_usuario(self, record: Usuario) -> None:
        if not self._is_admin:
            return
        self._delete_gate.request(
            lambda: self._usuario_service.delete(record.id),
            title="Excluir Usuário",
            message=f"Deseja excluir o usuário '{record.nome}'? Esta ação não pode ser desfeita.",
            confirm_text="Excluir",
            danger=True,
            on_success=lambda _result: self._usuario_deleted(record.id),
        )

    def _usuario_deleted(self, record_id: int) -> None:
        self._usuarios.remove(record_id)
        self._refresh_usuario_view()
        self._set_status("Usuário excluído com sucesso!")
