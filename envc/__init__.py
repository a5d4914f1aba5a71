"""
envc encrypts and decrypts the values of .env files, leaving keys, comments and blank lines
untouched so the encrypted file can be committed and diffed like the original.

Filenames are paired by simple rules that select files to process and where the results
will be written:

\b
    * '.env', '.env.local', ... are encrypted to '.env.enc', '.env.local.enc', ...
    * '.env.enc' and '.env.encrypted' are decrypted to '.env'.

Configure the password (applies to encrypt and decrypt):

\b
    $ export ENVC_PASSWORD="correct horse battery staple"

Encrypt a plaintext file into its encrypted sibling:

\b
    $ envc encrypt .env
    $ cat .env.enc

Decrypt an encrypted file to a chosen path:

\b
    $ envc decrypt .env.enc -o .env.local

Pick files interactively from the current directory:

\b
    $ envc encrypt
    $ envc decrypt
"""

__version__ = '1.0.0'
