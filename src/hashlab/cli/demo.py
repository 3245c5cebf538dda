"""Interactive menu driver for exercising a table by hand."""

from __future__ import annotations

from collections.abc import Callable

from hashlab.core.tables import HashTable

MENU = (
    "\nOptions:\n"
    "\t1. Add/Replace a Key-Value Pair\n"
    "\t2. Get the value associated with a key\n"
    "\t3. Remove a key\n"
    "\t4. Resize the table\n"
    "\t5. Display the table\n"
    "\t6. Quit"
)

INTRO = (
    "\nThis is a demo interactive program for your hash table. Keys and values are "
    "stored as strings, so entering 1 as a key stores the string \"1\", not the integer 1."
)

RULE = "*" * 42


def force_int_choice(
    prompt: str,
    minimum: int | None,
    maximum: int | None,
    *,
    input_fn: Callable[[str], str],
    print_fn: Callable[[str], None],
) -> int:
    """Prompt until the reply parses as an integer within the bounds."""

    while True:
        raw = input_fn(prompt)
        try:
            choice = int(raw.strip())
        except ValueError:
            print_fn("You must enter a valid integer.")
            continue
        if (minimum is None or choice >= minimum) and (maximum is None or choice <= maximum):
            return choice
        print_fn(f"You must enter an integer between {minimum} and {maximum}.")


def run_demo(
    table: HashTable,
    *,
    input_fn: Callable[[str], str] = input,
    print_fn: Callable[[str], None] = print,
) -> None:
    """Run the add/get/remove/resize/display menu until the user quits.

    Only the public table contract is used, so either backend can be mounted.
    End of input is treated as a request to quit.
    """

    def pause() -> None:
        print_fn("(Hit <Enter> to Continue)")
        input_fn("")

    print_fn(INTRO)
    try:
        while True:
            print_fn(MENU)
            choice = force_int_choice(
                "Enter a menu choice: ", 1, 6, input_fn=input_fn, print_fn=print_fn
            )
            if choice == 6:
                return
            if choice == 1:
                print_fn("----------Adding/Updating a Key-Value Pair----------")
                key = input_fn("Enter a key: ")
                value = input_fn("Enter a value: ")
                before = table.size()
                table.put(key, value)
                print_fn(("Updated" if before == table.size() else "Added") + " value at key.")
                pause()
            elif choice == 2:
                print_fn("----------Getting a Value by Key----------")
                key = input_fn("Enter a key: ")
                found = table.get(key)
                print_fn("No such key" if found is None else f"Associated value is {found}")
                pause()
            elif choice == 3:
                print_fn("----------Removing a Key-Value Pair----------")
                key = input_fn("Enter a key: ")
                removed = table.remove(key)
                print_fn("No such key" if removed is None else f"Removed pair was ({key},{removed})")
                pause()
            elif choice == 4:
                print_fn("----------Resizing the Table----------")
                size = force_int_choice(
                    "Enter a new size: ", None, None, input_fn=input_fn, print_fn=print_fn
                )
                done = table.rehash(size)
                print_fn("Resized table" if done else "Unable to resize table to requested size")
                pause()

            print_fn(RULE)
            print_fn(f"Table Size: {table.size()}, Capacity: {table.capacity()}")
            print_fn(table.to_string_debug())
            print_fn(RULE)
            pause()
    except EOFError:
        return
