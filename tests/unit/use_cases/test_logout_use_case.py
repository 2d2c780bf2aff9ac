from uuid import uuid4

import pytest

from bastion.app.use_cases.auth.logout_use_case import LogoutUseCase


@pytest.mark.asyncio
async def test_logout_revokes_all_sessions(mock_uow):
    user_id = uuid4()
    mock_uow.sessions.revoke_all_by_user_id.return_value = 3

    result = await LogoutUseCase(mock_uow).execute(user_id)

    assert result.is_ok()
    assert result.value.revoked_count == 3
    assert mock_uow.sessions.revoke_all_by_user_id.call_args.args[0] == user_id
    assert mock_uow.audit_events.create.call_args.args[0].action == "logout"
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_logout_is_idempotent(mock_uow):
    mock_uow.sessions.revoke_all_by_user_id.return_value = 0

    result = await LogoutUseCase(mock_uow).execute(uuid4())

    assert result.is_ok()
    assert result.value.revoked_count == 0
