from .cli import document_main

document_main()
