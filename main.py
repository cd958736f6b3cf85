from rich.pretty import pprint

from deepflags import *


class DisplayFile(FlagGroup):
    file = Scalar("--file", "-f", metavar="PATH",
                  descr="Specifies the file to read (reads from stdin by default).")
    label = Scalar("--label", "-l", metavar="LABEL",
                   descr="Assigns a label to this file's tab.")
    bookmarks = Vector("--bookmark", "-b", type=int, metavar="LINE",
                       descr="Gives the lines of this file to bookmark.")
    create = Switch("-p", descr=(
        "Denotes that if this file does not exist, it should be created. "
        "If bookmarks are specified, the file will be sized to contain the largest bookmark."
    ))


class AllFlags(FlagGroup):
    files = Repeated("--display", "-D", type=DisplayFile,
                     descr="Create a tab to display a given file.")


def main():
    flags = AllFlags()
    flags.print_help()
    if not flags.parse_args():
        print("Flag parse failed, but continuing anyway for demo purposes.")

    files = flags.files.value
    print("I was told to load %d files." % len(files))
    for record in files:
        parts = []
        if record.file.present:
            parts.append("I will load %r" % record.file.value)
        else:
            parts.append("I will read from stdin")
        if record.label.present:
            parts.append("labeling the tab %r" % record.label.value)
        if bookmarks := record.bookmarks.value:
            lines = ", ".join(map(str, bookmarks[:-1]))
            parts.append("bookmarking lines %s" % (
                "%s and %d" % (lines, bookmarks[-1]) if lines else bookmarks[-1]
            ))
        parts.append("%s if the file doesn't exist." % ("creating the file" if record.create.present else "bailing"))
        print(", ".join(parts))


if __name__ == '__main__':
    main()
    pprint(AllFlags())
