import PyInstaller.__main__


def main() -> None:
    PyInstaller.__main__.run(
        ["--onefile", "school_admin/main.py", "--name", "school-admin"]
    )


if __name__ == "__main__":
    main()
