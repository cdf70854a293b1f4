"""Main CLI application using Cyclopts.

`serve` runs the API; the other commands are thin HTTP clients or local
development helpers.
"""

import cyclopts

from idlink.cli.commands import serve, show, token

app = cyclopts.App(
    name="idlink",
    help="idlink - link GitHub accounts to corporate identities",
)

app.command(serve.app, name="serve")
app.command(show.app, name="show")
app.command(token.app, name="token")
