from condoadmin.ui.dialogs.condominio_dialog import CondominioFields, create_condominio_dialog
from condoadmin.ui.dialogs.confirm_dialog import ConfirmGateDialog
from condoadmin.ui.dialogs.edit_dialog import EditDialogBase
from condoadmin.ui.dialogs.login_dialog import LoginDialog
from condoadmin.ui.dialogs.settings_dialog import SupabaseSettingsDialog
from condoadmin.ui.dialogs.usuario_dialog import UsuarioFields, create_usuario_dialog

__all__ = [
    "CondominioFields",
    "ConfirmGateDialog",
    "EditDialogBase",
    "LoginDialog",
    "SupabaseSettingsDialog",
    "UsuarioFields",
    "create_condominio_dialog",
    "create_usuario_dialog",
]
