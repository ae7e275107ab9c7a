from __future__ import annotations

import io
from datetime import date

import pandas as pd
import pytest

HEADER = "会社名,氏名,メールアドレス,部署,役職"


@pytest.fixture
def seeded(repo, make_employee):
    repo.seed(
        make_employee(1, "山田太郎", "yamada@example.com", department="営業部", minutes_ago=10),
        make_employee(2, "佐藤花子", "sato@example.com", department="人事部", position="課長"),
    )
    return repo


def _upload(client, text: str, filename: str = "employees.csv", path: str = "/employees/import"):
    return client.post(
        path,
        data={"file": (io.BytesIO(text.encode("utf-8")), filename)},
        content_type="multipart/form-data",
    )


def test_root_redirects_to_list(client):
    resp = client.get("/")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/employees")


def test_list_shows_all_employees(client, seeded):
    body = client.get("/employees").get_data(as_text=True)

    assert "全2件" in body
    assert "山田太郎" in body and "佐藤花子" in body


def test_list_search_shows_filtered_count(client, seeded):
    body = client.get("/employees", query_string={"q": "人事"}).get_data(as_text=True)

    assert "全2件中 1件表示" in body
    assert "佐藤花子" in body
    assert "山田太郎" not in body


def test_list_empty_states(client, seeded, repo):
    body = client.get("/employees", query_string={"q": "存在しない"}).get_data(as_text=True)
    assert "検索条件に一致する従業員が見つかりません。" in body

    repo.clear()
    body = client.get("/employees").get_data(as_text=True)
    assert "従業員が登録されていません。" in body


def test_list_fetch_failure_offers_retry(client, repo):
    repo.fail_list = True

    resp = client.get("/employees")
    body = resp.get_data(as_text=True)

    assert resp.status_code == 200
    assert "従業員データの取得に失敗しました。後でもう一度お試しください。" in body
    assert "再試行" in body


def test_register_creates_employee_and_redirects(client, repo):
    resp = client.post(
        "/register-employee",
        data={
            "company_name": "株式会社サンプル",
            "name": "山田太郎",
            "email": "yamada@example.com",
            "department": "営業部",
            "position": "部長",
        },
    )

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/employees")
    assert [e.email for e in repo.rows] == ["yamada@example.com"]


def test_register_duplicate_email_is_shown_on_form(client, seeded):
    resp = client.post(
        "/register-employee",
        data={
            "company_name": "株式会社サンプル",
            "name": "別の山田",
            "email": "yamada@example.com",
            "department": "営業部",
            "position": "主任",
        },
    )
    body = resp.get_data(as_text=True)

    assert resp.status_code == 200
    assert "このメールアドレスは既に登録されています" in body
    assert "別の山田" in body
    assert len(seeded.rows) == 2


def test_register_required_fields_are_shown_on_form(client, repo):
    body = client.post("/register-employee", data={}).get_data(as_text=True)

    for message in ["会社名は必須です", "氏名は必須です", "メールアドレスは必須です", "部署は必須です", "役職は必須です"]:
        assert message in body
    assert repo.rows == []


def test_email_exists_api(client, seeded, repo):
    assert client.get("/api/employees/email-exists", query_string={"email": "sato@example.com"}).get_json() == {
        "success": True,
        "exists": True,
    }
    assert client.get("/api/employees/email-exists", query_string={"email": "new@example.com"}).get_json()["exists"] is False
    assert client.get("/api/employees/email-exists").status_code == 400

    repo.fail_exists = True
    resp = client.get("/api/employees/email-exists", query_string={"email": "x@example.com"})
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "メールアドレスの検証中にエラーが発生しました"


def test_export_csv_downloads_filtered_list(client, seeded):
    resp = client.get("/employees/export.csv", query_string={"q": "sato"})

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment" in resp.headers["Content-Disposition"]
    data = resp.get_data()
    assert data.startswith(b"\xef\xbb\xbf")
    lines = data[3:].decode("utf-8").split("\n")
    assert lines[0] == HEADER
    assert len(lines) == 2
    assert "sato@example.com" in lines[1]


def test_template_download(client):
    resp = client.get("/employees/import/template.csv")

    assert resp.status_code == 200
    assert resp.get_data().startswith(b"\xef\xbb\xbf" + HEADER.encode("utf-8"))


def test_import_success_redirects_with_count(client, repo):
    resp = _upload(client, f"{HEADER}\n株式会社A,山田太郎,yamada@example.com,営業部,部長\n")

    assert resp.status_code == 302
    assert [e.name for e in repo.rows] == ["山田太郎"]


def test_import_partial_failure_lists_errors(client, seeded, repo):
    text = "\n".join(
        [
            HEADER,
            "株式会社A,鈴木一郎,suzuki@example.com,開発部,主任",
            "株式会社A,重複さん,yamada@example.com,営業部,主任",
        ]
    )

    body = _upload(client, text).get_data(as_text=True)

    assert "1件の従業員を登録しました" in body
    assert "重複さんのメールアドレスは既に登録されています" in body
    assert len(repo.rows) == 3


def test_import_without_file(client):
    body = client.post("/employees/import", data={}, content_type="multipart/form-data").get_data(as_text=True)

    assert "ファイルをアップロードしてください" in body


def test_import_api_reports_json(client, repo):
    resp = _upload(client, f"{HEADER}\n株式会社A,,yamada@example.com,営業部,部長", path="/api/employees/import")

    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "imported": 0, "errors": ["2行目: 氏名は必須です"]}


def test_import_header_only_file_is_not_a_success(client, repo):
    body = client.post(
        "/employees/import",
        data={"file": (io.BytesIO(f"{HEADER}\n".encode("utf-8")), "employees.csv")},
        content_type="multipart/form-data",
    ).get_data(as_text=True)

    assert "インポートできる従業員データがありません" in body
    assert "0件の従業員を登録しました" not in body
    assert repo.rows == []


def test_import_api_header_only_file_is_rejected(client):
    resp = _upload(client, f"{HEADER}\n\n\n", path="/api/employees/import")

    assert resp.status_code == 400
    assert resp.get_json() == {
        "success": False,
        "imported": 0,
        "errors": ["インポートできる従業員データがありません"],
    }


def test_oversized_upload_redirects_back_to_import_page(app, client, repo):
    app.config["MAX_CONTENT_LENGTH"] = 1024

    resp = _upload(client, HEADER + "\n" + "x" * 4096, path="/employees/import")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/employees/import")
    body = client.get("/employees/import").get_data(as_text=True)
    assert "ファイルサイズは5MB以下にしてください" in body
    assert repo.rows == []


def test_oversized_upload_to_api_returns_json(app, client, repo):
    app.config["MAX_CONTENT_LENGTH"] = 1024

    resp = _upload(client, HEADER + "\n" + "x" * 4096, path="/api/employees/import")

    assert resp.status_code == 413
    assert resp.get_json() == {
        "success": False,
        "imported": 0,
        "errors": ["ファイルサイズは5MB以下にしてください"],
    }
    assert repo.rows == []


def test_export_xlsx_downloads_dated_workbook(client, seeded):
    resp = client.get("/employees/export.xlsx", query_string={"q": "yamada"})

    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    disposition = resp.headers["Content-Disposition"]
    assert "attachment" in disposition
    assert disposition.endswith(f"_{date.today():%Y%m%d}.xlsx")

    df = pd.read_excel(io.BytesIO(resp.get_data()), sheet_name="従業員一覧")
    assert list(df["メールアドレス"]) == ["yamada@example.com"]
