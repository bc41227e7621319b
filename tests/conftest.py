import os
import tempfile

import pytest

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("SQLSHIFT_LOG_DIR", tempfile.mkdtemp(prefix="sqlshift-logs-"))

SAMPLE_SQLSERVER = """-- Sample SQL Server queries
INSERT INTO [dbo].[AbpAuditLogs] ([Id], [BrowserInfo], [ExecutionTime])
VALUES (NEWID(), 'Chrome 120.0', GETDATE());

SELECT TOP 10 [Id], LEN([MethodName]) as MethodLength
FROM [dbo].[AbpAuditLogs]
WHERE [ExecutionTime] >= GETUTCDATE() - 7
  AND ISNULL([Exception], '') = '';
"""


@pytest.fixture
def sample_sql():
    return SAMPLE_SQLSERVER


@pytest.fixture
def sql_file(tmp_path, sample_sql):
    path = tmp_path / "sample.sql"
    path.write_text(sample_sql, encoding="utf-8")
    return path
