import pytest
from fastapi import status


@pytest.fixture
def task_list_id(authenticated_client):
    """A list owned by the authenticated test user"""
    response = authenticated_client.post("/api/tasklists", json={"title": "Work"})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["id"]


@pytest.fixture
def shared_list(client, create_user_and_token):
    """
    A list owned by a@x.com and shared with b@x.com.
    Returns a dict with both tokens, the list id and the share id.
    """

    def _shared_list(permission: str):
        owner_token = create_user_and_token("a@x.com")
        guest_token = create_user_and_token("b@x.com")

        list_response = client.post(
            "/api/tasklists",
            json={"title": "Groceries"},
            headers={"Authorization": f"Bearer {owner_token}"},
        )
        list_id = list_response.json()["id"]

        share_response = client.post(
            f"/api/shares/{list_id}",
            json={"email": "b@x.com", "permission": permission},
            headers={"Authorization": f"Bearer {owner_token}"},
        )
        assert share_response.status_code == status.HTTP_201_CREATED

        return {
            "owner_token": owner_token,
            "guest_token": guest_token,
            "list_id": list_id,
            "share_id": share_response.json()["id"],
        }

    return _shared_list


def test_create_task_successfully(authenticated_client, task_list_id):
    """Test that the owner can create a task"""

    # ARRANGE
    task_data = {"title": "Write more tests", "description": "Cover the task endpoints"}

    # ACT
    response = authenticated_client.post(f"/api/tasks/{task_list_id}", json=task_data)

    # ASSERT
    assert response.status_code == status.HTTP_201_CREATED

    data = response.json()
    assert data["title"] == "Write more tests"
    assert data["description"] == "Cover the task endpoints"
    assert data["task_list_id"] == task_list_id
    assert "id" in data
    assert "created_at" in data


def test_create_task_defaults_to_pending(authenticated_client, task_list_id):
    """Test that a task created without a status reads back as pending"""

    # ARRANGE
    create_response = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "No status given"}
    )
    assert create_response.status_code == status.HTTP_201_CREATED

    # ACT
    response = authenticated_client.get(f"/api/tasks/{task_list_id}")

    # ASSERT
    assert response.json()["tasks"][0]["status"] == "pending"


def test_create_task_with_invalid_status(authenticated_client, task_list_id):
    """Test that statuses outside the three valid values are rejected"""

    # ACT
    response = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "Bad status", "status": "done"}
    )

    # ASSERT
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["field"] == "status"


def test_create_task_validation(authenticated_client, task_list_id):
    """Test that title and description limits are enforced"""

    # ACT
    empty_title = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": ""}
    )
    long_description = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "Ok", "description": "d" * 1001}
    )

    # ASSERT
    assert empty_title.status_code == status.HTTP_400_BAD_REQUEST
    assert long_description.status_code == status.HTTP_400_BAD_REQUEST


def test_create_task_without_authentication(client):
    """Test that creating a task without auth fails"""

    # ACT
    response = client.post("/api/tasks/1", json={"title": "Unauthorized task"})

    # ASSERT
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_task_in_missing_list(authenticated_client):
    """Test that task routes report a missing list as forbidden"""

    # ACT
    response = authenticated_client.post("/api/tasks/99999", json={"title": "Orphan"})

    # ASSERT
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_get_tasks_newest_first(authenticated_client, task_list_id):
    """Test that tasks come back newest first with the caller's permission"""

    # ARRANGE
    authenticated_client.post(f"/api/tasks/{task_list_id}", json={"title": "First"})
    authenticated_client.post(f"/api/tasks/{task_list_id}", json={"title": "Second"})

    # ACT
    response = authenticated_client.get(f"/api/tasks/{task_list_id}")

    # ASSERT
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [task["title"] for task in data["tasks"]] == ["Second", "First"]
    assert data["permission"] == "owner"


def test_get_tasks_without_access(client, create_user_and_token):
    """Test that strangers can't read tasks of a list"""

    # ARRANGE
    owner_token = create_user_and_token("a@x.com")
    stranger_token = create_user_and_token("c@x.com")
    list_id = client.post(
        "/api/tasklists",
        json={"title": "Private"},
        headers={"Authorization": f"Bearer {owner_token}"},
    ).json()["id"]

    # ACT
    response = client.get(
        f"/api/tasks/{list_id}", headers={"Authorization": f"Bearer {stranger_token}"}
    )

    # ASSERT
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_partial_update_keeps_other_fields(authenticated_client, task_list_id):
    """Test that updating only the status leaves title and description alone"""

    # ARRANGE
    task = authenticated_client.post(
        f"/api/tasks/{task_list_id}",
        json={"title": "Original title", "description": "Original description"},
    ).json()

    # ACT
    response = authenticated_client.put(
        f"/api/tasks/{task_list_id}/{task['id']}", json={"status": "completed"}
    )

    # ASSERT
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "completed"
    assert data["title"] == "Original title"  # Unchanged
    assert data["description"] == "Original description"  # Unchanged


def test_update_task_clears_description_with_null(authenticated_client, task_list_id):
    """Test that an explicit null description clears it"""

    # ARRANGE
    task = authenticated_client.post(
        f"/api/tasks/{task_list_id}",
        json={"title": "Has description", "description": "Remove me"},
    ).json()

    # ACT
    response = authenticated_client.put(
        f"/api/tasks/{task_list_id}/{task['id']}", json={"description": None}
    )

    # ASSERT
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["description"] is None
    assert response.json()["title"] == "Has description"


def test_update_task_cannot_clear_title(authenticated_client, task_list_id):
    """Test that title can't be set to null or empty"""

    # ARRANGE
    task = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "Keep me"}
    ).json()

    # ACT
    null_response = authenticated_client.put(
        f"/api/tasks/{task_list_id}/{task['id']}", json={"title": None}
    )
    empty_response = authenticated_client.put(
        f"/api/tasks/{task_list_id}/{task['id']}", json={"title": "   "}
    )

    # ASSERT
    assert null_response.status_code == status.HTTP_400_BAD_REQUEST
    assert empty_response.status_code == status.HTTP_400_BAD_REQUEST


def test_update_task_with_no_fields(authenticated_client, task_list_id):
    """Test that an empty update body is rejected"""

    # ARRANGE
    task = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "Untouched"}
    ).json()

    # ACT
    response = authenticated_client.put(f"/api/tasks/{task_list_id}/{task['id']}", json={})

    # ASSERT
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_update_nonexistent_task(authenticated_client, task_list_id):
    """Test that updating a non-existent task returns 404"""

    # ACT
    response = authenticated_client.put(
        f"/api/tasks/{task_list_id}/99999", json={"title": "New title"}
    )

    # ASSERT
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_task_from_another_list(authenticated_client):
    """Test that a task id from a different list is refused, not applied"""

    # ARRANGE
    list_a = authenticated_client.post("/api/tasklists", json={"title": "A"}).json()["id"]
    list_b = authenticated_client.post("/api/tasklists", json={"title": "B"}).json()["id"]
    task = authenticated_client.post(
        f"/api/tasks/{list_b}", json={"title": "Lives in B"}
    ).json()

    # ACT
    response = authenticated_client.put(
        f"/api/tasks/{list_a}/{task['id']}", json={"title": "Moved?"}
    )

    # ASSERT
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Task does not belong to this task list"

    tasks_b = authenticated_client.get(f"/api/tasks/{list_b}").json()["tasks"]
    assert tasks_b[0]["title"] == "Lives in B"


def test_update_task_status(authenticated_client, task_list_id):
    """Test the quick status toggle in any direction"""

    # ARRANGE
    task = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "Toggle me", "status": "completed"}
    ).json()

    # ACT
    response = authenticated_client.patch(
        f"/api/tasks/{task_list_id}/{task['id']}/status", json={"status": "pending"}
    )

    # ASSERT
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "pending"
    assert response.json()["title"] == "Toggle me"


def test_update_task_status_invalid(authenticated_client, task_list_id):
    """Test that the status toggle rejects unknown statuses"""

    # ARRANGE
    task = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "Toggle me"}
    ).json()

    # ACT
    response = authenticated_client.patch(
        f"/api/tasks/{task_list_id}/{task['id']}/status", json={"status": "archived"}
    )

    # ASSERT
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_delete_task_successfully(authenticated_client, task_list_id):
    """Test that the owner can delete a task"""

    # ARRANGE
    task = authenticated_client.post(
        f"/api/tasks/{task_list_id}", json={"title": "Delete me"}
    ).json()

    # ACT
    response = authenticated_client.delete(f"/api/tasks/{task_list_id}/{task['id']}")

    # ASSERT
    assert response.status_code == status.HTTP_200_OK

    tasks = authenticated_client.get(f"/api/tasks/{task_list_id}").json()["tasks"]
    assert tasks == []


def test_delete_nonexistent_task(authenticated_client, task_list_id):
    """Test that deleting a non-existent task returns 404"""

    # ACT
    response = authenticated_client.delete(f"/api/tasks/{task_list_id}/99999")

    # ASSERT
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_task_from_another_list(authenticated_client):
    """Test that delete checks the task's parent list"""

    # ARRANGE
    list_a = authenticated_client.post("/api/tasklists", json={"title": "A"}).json()["id"]
    list_b = authenticated_client.post("/api/tasklists", json={"title": "B"}).json()["id"]
    task = authenticated_client.post(
        f"/api/tasks/{list_b}", json={"title": "Lives in B"}
    ).json()

    # ACT
    response = authenticated_client.delete(f"/api/tasks/{list_a}/{task['id']}")

    # ASSERT
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert len(authenticated_client.get(f"/api/tasks/{list_b}").json()["tasks"]) == 1


def test_viewer_can_read_but_not_write(client, shared_list):
    """Test that a view share allows reads and forbids every write"""

    # ARRANGE
    ctx = shared_list("view")
    owner_headers = {"Authorization": f"Bearer {ctx['owner_token']}"}
    guest_headers = {"Authorization": f"Bearer {ctx['guest_token']}"}
    list_id = ctx["list_id"]

    task = client.post(
        f"/api/tasks/{list_id}", json={"title": "Owner's task"}, headers=owner_headers
    ).json()

    # ACT
    read = client.get(f"/api/tasks/{list_id}", headers=guest_headers)
    create = client.post(
        f"/api/tasks/{list_id}", json={"title": "Sneaky"}, headers=guest_headers
    )
    update = client.put(
        f"/api/tasks/{list_id}/{task['id']}", json={"title": "Changed"}, headers=guest_headers
    )
    toggle = client.patch(
        f"/api/tasks/{list_id}/{task['id']}/status",
        json={"status": "completed"},
        headers=guest_headers,
    )
    delete = client.delete(f"/api/tasks/{list_id}/{task['id']}", headers=guest_headers)

    # ASSERT
    assert read.status_code == status.HTTP_200_OK
    assert read.json()["permission"] == "view"
    assert create.status_code == status.HTTP_403_FORBIDDEN
    assert create.json()["message"] == "You need edit permission to add tasks"
    assert update.status_code == status.HTTP_403_FORBIDDEN
    assert toggle.status_code == status.HTTP_403_FORBIDDEN
    assert delete.status_code == status.HTTP_403_FORBIDDEN


def test_editor_can_manage_tasks(client, shared_list):
    """Test that an edit share allows task create, update and delete"""

    # ARRANGE
    ctx = shared_list("edit")
    guest_headers = {"Authorization": f"Bearer {ctx['guest_token']}"}
    list_id = ctx["list_id"]

    # ACT
    create = client.post(
        f"/api/tasks/{list_id}", json={"title": "Editor task"}, headers=guest_headers
    )
    task_id = create.json()["id"]
    update = client.put(
        f"/api/tasks/{list_id}/{task_id}",
        json={"status": "in_progress"},
        headers=guest_headers,
    )
    delete = client.delete(f"/api/tasks/{list_id}/{task_id}", headers=guest_headers)

    # ASSERT
    assert create.status_code == status.HTTP_201_CREATED
    assert update.status_code == status.HTTP_200_OK
    assert update.json()["status"] == "in_progress"
    assert delete.status_code == status.HTTP_200_OK


def test_upgrading_share_unlocks_task_creation(client, shared_list):
    """Test viewer gets 403, then 201 once the owner upgrades the share to edit"""

    # ARRANGE
    ctx = shared_list("view")
    guest_headers = {"Authorization": f"Bearer {ctx['guest_token']}"}
    list_id = ctx["list_id"]

    first_attempt = client.post(
        f"/api/tasks/{list_id}", json={"title": "Bread"}, headers=guest_headers
    )
    assert first_attempt.status_code == status.HTTP_403_FORBIDDEN

    # ACT
    upgrade = client.put(
        f"/api/shares/{list_id}/{ctx['share_id']}",
        json={"permission": "edit"},
        headers={"Authorization": f"Bearer {ctx['owner_token']}"},
    )
    second_attempt = client.post(
        f"/api/tasks/{list_id}", json={"title": "Bread"}, headers=guest_headers
    )

    # ASSERT
    assert upgrade.status_code == status.HTTP_200_OK
    assert second_attempt.status_code == status.HTTP_201_CREATED
