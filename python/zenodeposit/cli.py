"""
a command-line interface for depositing files into Zenodo.  The :py:func:`main` function provides
the implementation.

EXIT STATUS

  0 - normal successful completion
  2 - an error was found in the option or argument values (including the record description)
  3 - syntax or other read error while reading the configuration file
  5 - an error occurred while communicating with Zenodo
  6 - a configuration error was detected (e.g. the access token was not provided)
  7 - the deposition is not in a state that allows the requested operation
  8 - Zenodo reported a failure while receiving the uploaded file
"""
import sys, os, re, json
from argparse import ArgumentParser

import yaml

from . import config
from .exceptions import (DepositException, ConfigurationError, RemoteServiceError, ProtocolError,
                         UploadError, PreconditionError)
from .metadata import RecordDraft, validate_draft
from .files import LocalFileSource
from .utils.logging import configure_log
from .workflow import DepositionWorkflow, DEFAULT_FILE_FIELD

prog = re.sub(r'\.py$', '', os.path.basename(sys.argv[0]))

_exit_stats = [
    (ConfigurationError,  6),
    (PreconditionError,   7),
    (UploadError,         8),
    (RemoteServiceError,  5),
    (ProtocolError,       5)
]

class Failure(Exception):
    """
    an exception indicating that the command failed and the program should exit with a
    non-zero status
    """
    def __init__(self, message, exitcode=1, cause=None):
        super(Failure, self).__init__(message)
        self.exitcode = exitcode
        self.cause = cause

def define_options(progname):
    """
    return an ArgumentParser instance that is configured with options
    for the command-line interface.
    """
    description = "Deposit a file and its description into Zenodo, either as a new record or " \
                  "as a new version of a previously published one"
    epilog = "Run '%(prog)s CMD -h' for help specifically on CMD."

    parser = ArgumentParser(progname, None, description, epilog)

    parser.add_argument('-c', '--config-file', type=str, dest='cfgfile', metavar='FILE',
                        help="a YAML or JSON file containing the configuration to use")
    parser.add_argument('-t', '--token', type=str, dest='token', metavar='TOKEN',
                        help="the Zenodo access token to use; if not provided, the value from the "+
                             "configuration or the ZENODO_ACCESS_TOKEN environment variable is used")
    parser.add_argument('-s', '--sandbox', action='store_true', dest='sandbox', default=None,
                        help="deposit into the Zenodo sandbox service rather than production")
    parser.add_argument('-l', '--logfile', action='store', dest='logfile', type=str, metavar='FILE',
                        help="write messages that normally go to standard error to FILE as well.  "+
                             "If -q is also specified, the messages will only go to the logfile")
    parser.add_argument('-v', '--verbose', action='store_true', dest='verbose',
                        help="print more (debug) messages to standard error and/or the log file")
    parser.add_argument('-q', '--quiet', action='store_true', dest='quiet',
                        help="suppress all error and warning messages to standard error")

    subparsers = parser.add_subparsers(title="subcommands", dest='cmd', metavar='CMD')

    pub = subparsers.add_parser('publish', help="publish a file as a new Zenodo record")
    pub.add_argument('file', metavar='FILE', type=str, help="the file to deposit")
    define_metadata_options(pub)

    nv = subparsers.add_parser('newversion',
                               help="publish a new version of a previously published record")
    nv.add_argument('depid', metavar='DEPOSITION_ID', type=str,
                    help="the identifier of the published deposition to create a new version of")
    nv.add_argument('-f', '--file', type=str, dest='file', metavar='FILE',
                    help="a file to replace the file in the previous version")
    define_metadata_options(nv)

    md = subparsers.add_parser('metadata',
                               help="print the metadata that would be sent to Zenodo (without "+
                                    "contacting Zenodo)")
    define_metadata_options(md)

    return parser

def define_metadata_options(parser):
    """
    add the options for setting the record's descriptive fields to the given parser
    """
    parser.add_argument('-T', '--title', type=str, dest='title', metavar='TITLE',
                        help="the record's title")
    parser.add_argument('-d', '--description', type=str, dest='description', metavar='TEXT',
                        help="a description of the record")
    parser.add_argument('-a', '--author', type=str, dest='author', metavar='NAME',
                        help="the record's author, as \"Last, First\" or \"First Last\"")
    parser.add_argument('-o', '--organization', type=str, dest='organization', metavar='ORG',
                        help="the author's affiliation")
    parser.add_argument('-C', '--contributor', type=str, dest='contributors', action='append',
                        metavar='NAME:TYPE', help="a contributor and their role (repeatable)")
    parser.add_argument('-k', '--tag', type=str, dest='tags', action='append', metavar='TAG',
                        help="a keyword describing the record (repeatable)")
    parser.add_argument('-r', '--resource-type', type=str, dest='resource_type', metavar='TYPE',
                        help="the type of resource, optionally with a subtype (e.g. dataset, "+
                             "publication/book, image/photo)")
    parser.add_argument('-D', '--dates', type=str, dest='dateinterval', metavar='INTERVAL',
                        help="the publication date or date interval, YYYY[-MM[-DD]]/YYYY[-MM[-DD]]")
    parser.add_argument('-V', '--visibility', type=str, dest='visibility', metavar='ACCESS',
                        choices=["open", "restricted", "closed"],
                        help="the access level: open, restricted, or closed")
    parser.add_argument('-m', '--community', type=str, dest='communities', action='append',
                        metavar='ID', help="a community to submit the record to (repeatable)")
    parser.add_argument('-L', '--license', type=str, dest='license', metavar='ID',
                        help="the identifier of the license the record is released under")

def draft_from_options(opts) -> RecordDraft:
    """
    return a RecordDraft initialized with the descriptive fields given on the command line
    """
    fields = {}
    for name in "title description author organization resource_type dateinterval visibility license tags".split():
        if getattr(opts, name, None) is not None:
            fields[name] = getattr(opts, name)

    if getattr(opts, 'contributors', None):
        fields['contributors'] = []
        for contrib in opts.contributors:
            name, sep, ctype = contrib.rpartition(':')
            if not sep:
                raise Failure(f"--contributor: expected NAME:TYPE, got {contrib}", 2)
            fields['contributors'].append({"name": name.strip(), "type": ctype.strip()})

    if getattr(opts, 'communities', None):
        fields['communities'] = [{"identifier": c} for c in opts.communities]

    return RecordDraft(**fields)

def main(progname, args, out=None):
    """
    execute the requested deposition operation
    :param str progname:  the name of the program, used in messages
    :param list    args:  the command-line arguments
    :param out:           the stream to print results to; defaults to standard out
    :raises Failure:  if the operation failed
    """
    if out is None:
        out = sys.stdout
    parser = define_options(progname)
    opts = parser.parse_args(args)
    if not opts.cmd:
        raise Failure("No subcommand specified; run with -h for help", 2)

    configure_log(prog, opts.logfile, opts.verbose, opts.quiet)

    # look for a provided configuration file
    cfg = {}
    if opts.cfgfile:
        try:
            cfg = read_config(opts.cfgfile)
        except EnvironmentError as ex:
            raise Failure("problem reading config file, {0}: {1}"
                          .format(opts.cfgfile, ex.strerror), 3, ex) from ex
    overrides = {}
    if opts.token:
        overrides['access_token'] = opts.token
    if opts.sandbox is not None:
        overrides['sandbox'] = opts.sandbox
    cfg = config.merge_config(overrides, cfg)

    draft = draft_from_options(opts)
    try:
        files = None
        if getattr(opts, 'file', None):
            files = LocalFileSource({cfg.get('file_field', DEFAULT_FILE_FIELD): opts.file})
        with DepositionWorkflow.from_config(cfg, draft, file_source=files) as wf:
            errs = validate_draft(wf.draft)
            if errs:
                raise Failure("Invalid record description:\n  " + "\n  ".join(errs), 2)

            if opts.cmd == 'metadata':
                json.dump(wf.build_metadata(), out, indent=2)
                out.write("\n")
                return

            if opts.cmd == 'publish':
                doi = wf.publish()
            else:
                doi = wf.create_new_version(opts.depid)

        out.write(doi)
        out.write("\n")

    except DepositException as ex:
        for cls, stat in _exit_stats:
            if isinstance(ex, cls):
                raise Failure(str(ex), stat, ex) from ex
        raise Failure(str(ex), 1, ex) from ex

def read_config(filepath):
    """
    read the configuration from a file having the given filepath

    :except Failure:  if the contents contains syntax or format errors
    :except IOError:  if a failure occurs while opening or reading the file
    """
    try:
        return dict(config.load_from_file(filepath))
    except (ValueError, yaml.YAMLError, ConfigurationError) as ex:
        raise Failure("Config parsing error: "+str(ex), 3, ex)
