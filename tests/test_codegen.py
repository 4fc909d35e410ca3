"""Tests for rendering and writing generated files."""

import datetime

import pytest

from schemagen import codegen
from schemagen.errors import ModuleNameTaken
from schemagen.schema import build

TS = "20240102030405"

EXPECTED_SCHEMA = """\
defmodule Phoenix.Blog.Post do
  use Ecto.Schema
  import Ecto.Changeset

  schema "blog_posts" do
    field :title, :string
    field :views, :integer
    field :published, :boolean, default: false

    timestamps()
  end

  @doc false
  def changeset(post, attrs) do
    post
    |> cast(attrs, [:title, :views, :published])
    |> validate_required([:title, :views, :published])
  end
end
"""

EXPECTED_MIGRATION = """\
defmodule Phoenix.Repo.Migrations.CreateBlogPosts do
  use Ecto.Migration

  def change do
    create table(:blog_posts) do
      add :title, :string
      add :views, :integer
      add :published, :boolean, default: false, null: false

      timestamps()
    end
  end
end
"""


class TestPaths:

    def test_timestamp(self):
        now = datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)
        assert codegen.timestamp(now) == TS

    def test_migration_file(self, config):
        schema = build(["Blog.Admin.User", "users"], config)
        assert codegen.migration_file(schema, TS) == f"priv/repo/migrations/{TS}_create_blog_admin_user.exs"

    def test_files_with_migration(self, config):
        schema = build(["Blog.Post", "posts"], config)
        assert codegen.files_to_be_generated(schema, TS) == [
            ("schema.ex.j2", "lib/phoenix/blog/post.ex"),
            ("migration.exs.j2", f"priv/repo/migrations/{TS}_create_blog_post.exs"),
        ]

    def test_files_without_migration(self, config):
        schema = build(["Blog.Post", "posts"], config, migration=False)
        assert codegen.files_to_be_generated(schema, TS) == [("schema.ex.j2", "lib/phoenix/blog/post.ex")]

    def test_embedded_never_migrates(self, config):
        schema = build(["Blog.Post", "posts"], config, embedded=True)
        assert len(codegen.files_to_be_generated(schema, TS)) == 1


class TestGenerate:
    """Render templates into a temporary project."""

    def test_schema_and_migration(self, config, tmp_path, capsys):
        schema = build(["Blog.Post", "blog_posts", "title:string", "views:integer", "published:boolean"], config)
        written = codegen.generate(schema, tmp_path, TS)

        assert [p.relative_to(tmp_path).as_posix() for p in written] == [
            "lib/phoenix/blog/post.ex",
            f"priv/repo/migrations/{TS}_create_blog_post.exs",
        ]
        assert written[0].read_text() == EXPECTED_SCHEMA
        assert written[1].read_text() == EXPECTED_MIGRATION
        assert "* creating lib/phoenix/blog/post.ex" in capsys.readouterr().out

    def test_references_and_indexes(self, config, tmp_path):
        schema = build(["Blog.Post", "blog_posts", "title:unique", "user_id:references:blog_users"], config)
        _, migration = codegen.generate(schema, tmp_path, TS)
        content = migration.read_text()
        assert "      add :user_id, references(:blog_users, on_delete: :nothing)\n" in content
        assert (
            "    end\n\n"
            "    create unique_index(:blog_posts, [:title])\n"
            "    create index(:blog_posts, [:user_id])\n"
            "  end\n"
        ) in content

        source = (tmp_path / "lib/phoenix/blog/post.ex").read_text()
        assert "    field :user_id, :id\n" in source
        assert "    |> unique_constraint(:title)\n" in source
        assert "cast(attrs, [:title])" in source

    def test_binary_id(self, binary_config, tmp_path):
        schema = build(["Blog.Post", "posts", "user_id:references:users"], binary_config)
        source_path, migration_path = codegen.generate(schema, tmp_path, TS)
        source = source_path.read_text()
        assert "  @primary_key {:id, :binary_id, autogenerate: true}\n" in source
        assert "  @foreign_key_type :binary_id\n" in source
        assert "    field :user_id, :binary_id\n" in source

        migration = migration_path.read_text()
        assert "    create table(:posts, primary_key: false) do\n" in migration
        assert "      add :id, :binary_id, primary_key: true\n" in migration
        assert "references(:users, on_delete: :nothing, type: :binary_id)" in migration

    def test_datetime_types(self, config, tmp_path):
        schema = build(
            ["Blog.Comment", "comments", "title:string", "drafted_at:datetime",
             "published_at:naive_datetime", "edited_at:utc_datetime"],
            config,
        )
        (source, _) = codegen.generate(schema, tmp_path, TS)
        content = source.read_text()
        assert "field :drafted_at, :naive_datetime" in content
        assert "field :published_at, :naive_datetime" in content
        assert "field :edited_at, :utc_datetime" in content

    def test_embedded_schema(self, config, tmp_path):
        schema = build(["Blog.Admin.User", "users", "name:string"], config, embedded=True)
        (source,) = codegen.generate(schema, tmp_path, TS)
        assert source == tmp_path / "lib/phoenix/blog/admin/user.ex"
        content = source.read_text()
        assert "defmodule Phoenix.Blog.Admin.User do" in content
        assert "  embedded_schema do\n" in content
        assert "timestamps()" not in content
        assert not (tmp_path / "priv").exists()

    def test_table_override(self, config, tmp_path):
        schema = build(["Blog.Post", "posts"], config, table="cms_posts")
        source, migration = codegen.generate(schema, tmp_path, TS)
        assert 'schema "cms_posts" do' in source.read_text()
        assert "Migrations.CreateCmsPosts do" in migration.read_text()


class TestConflicts:

    def test_no_conflicts(self, tmp_path):
        def confirm(question):
            raise AssertionError("should not prompt")

        assert codegen.prompt_for_conflicts([("schema.ex.j2", "lib/a.ex")], tmp_path, confirm)

    def test_conflict_declined(self, tmp_path, capsys):
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib/a.ex").write_text("old")
        assert not codegen.prompt_for_conflicts([("schema.ex.j2", "lib/a.ex")], tmp_path, lambda q: False)
        assert "  * lib/a.ex" in capsys.readouterr().out

    def test_conflict_accepted(self, tmp_path):
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib/a.ex").write_text("old")
        assert codegen.prompt_for_conflicts([("schema.ex.j2", "lib/a.ex")], tmp_path, lambda q: True)


class TestModuleNameAvailability:

    def test_free(self, config, tmp_path):
        schema = build(["Blog.Post", "posts"], config)
        codegen.check_module_name_availability(schema, tmp_path)

    def test_taken_elsewhere(self, config, tmp_path):
        other = tmp_path / "lib/phoenix/legacy.ex"
        other.parent.mkdir(parents=True)
        other.write_text("defmodule Phoenix.Blog.Post do\nend\n")
        schema = build(["Blog.Post", "posts"], config)
        with pytest.raises(ModuleNameTaken, match="Phoenix.Blog.Post is already taken"):
            codegen.check_module_name_availability(schema, tmp_path)

    def test_prefix_is_not_taken(self, config, tmp_path):
        other = tmp_path / "lib/phoenix/blog/post_tag.ex"
        other.parent.mkdir(parents=True)
        other.write_text("defmodule Phoenix.Blog.PostTag do\nend\n")
        schema = build(["Blog.Post", "posts"], config)
        codegen.check_module_name_availability(schema, tmp_path)

    def test_target_file_ignored(self, config, tmp_path):
        """Regenerating over the same file is handled by the conflict prompt."""
        target = tmp_path / "lib/phoenix/blog/post.ex"
        target.parent.mkdir(parents=True)
        target.write_text("defmodule Phoenix.Blog.Post do\nend\n")
        schema = build(["Blog.Post", "posts"], config)
        codegen.check_module_name_availability(schema, tmp_path)


class TestShellInstructions:

    def test_migration_reminder(self, config, capsys):
        codegen.print_shell_instructions(build(["Blog.Post", "posts"], config))
        assert "$ mix ecto.migrate" in capsys.readouterr().out

    def test_no_reminder_without_migration(self, config, capsys):
        codegen.print_shell_instructions(build(["Blog.Post", "posts"], config, migration=False))
        assert capsys.readouterr().out == ""
