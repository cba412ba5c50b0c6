"""
Spec templates, one per role.

Each template takes a SpecContext and returns the complete text of a Vitest
spec file built on Angular's TestBed. Templates are plain text renderers:
nothing here checks that the output compiles.
"""

import re
from collections.abc import Callable

from ..models import MethodSignature
from .base import SpecBuilder, SpecContext
from .dependencies import HTTP_CLIENT
from .http import flush_body, infer_http_verb, is_request_method, placeholder_arguments

ANGULAR_TESTING = "@angular/core/testing"
ANGULAR_HTTP = "@angular/common/http"
ANGULAR_HTTP_TESTING = "@angular/common/http/testing"
ANGULAR_ROUTER = "@angular/router"

ROUTER_NAMES = ("Router", "ActivatedRoute")

# Arguments passed to a functional guard, keyed by its functional type.
GUARD_ARGUMENTS: dict[str, tuple[str, ...]] = {
    "CanDeactivateFn": ("{} as unknown", "mockRoute", "mockState", "mockState"),
    "CanMatchFn": ("{} as Route", "[] as UrlSegment[]"),
}
DEFAULT_ROUTE_ARGUMENTS = ("mockRoute", "mockState")

VOID_ELEMENTS = frozenset({"input", "img", "br", "hr"})

_ATTRIBUTE_SELECTOR = re.compile(r"^(?P<tag>[a-zA-Z][\w-]*)?\[(?P<attribute>[\w-]+)(?:=[^\]]*)?\]$")
_ELEMENT_SELECTOR = re.compile(r"^[a-zA-Z][\w-]*$")


def _providers(builder: SpecBuilder, entries: list[str]) -> None:
    if not entries:
        return
    with builder.block("providers: [", "],"):
        builder.lines(*entries)


def _creation_test(builder: SpecBuilder, variable: str, title: str = "should be created") -> None:
    with builder.block(f"it('{title}', () => {{"):
        builder.line(f"expect({variable}).toBeTruthy();")


def _injected_class_spec(
    ctx: SpecContext,
    variable: str,
    leading: list[str] | None = None,
    exclude: tuple[str, ...] = (),
    extra_tests: Callable[[SpecBuilder], None] | None = None,
) -> SpecBuilder:
    """Shared shape of TestBed.inject based specs (class guards, resolvers, ...)."""
    name = ctx.subject
    builder = SpecBuilder()
    builder.use(ANGULAR_TESTING, "TestBed")
    ctx.import_dependencies(builder, exclude)
    builder.use(ctx.subject_path, name)

    with builder.block(f"describe('{ctx.label}', () => {{"):
        builder.line(f"let {variable}: {name};")
        ctx.declare_mocks(builder)
        builder.line()
        with builder.block("beforeEach(() => {"):
            ctx.assign_mocks(builder)
            with builder.block("TestBed.configureTestingModule({", "});"):
                _providers(builder, [*(leading or []), f"{name},", *ctx.provider_lines(exclude)])
            builder.line(f"{variable} = TestBed.inject({name});")
        builder.line()
        _creation_test(builder, variable)
        if extra_tests is not None:
            builder.line()
            extra_tests(builder)
    return builder


def component_spec(ctx: SpecContext) -> str:
    name = ctx.subject
    builder = SpecBuilder()
    builder.use(ANGULAR_TESTING, "ComponentFixture", "TestBed")
    ctx.import_dependencies(builder)
    builder.use(ctx.subject_path, name)

    with builder.block(f"describe('{ctx.label}', () => {{"):
        builder.line(f"let component: {name};")
        builder.line(f"let fixture: ComponentFixture<{name}>;")
        ctx.declare_mocks(builder)
        builder.line()
        with builder.block("beforeEach(async () => {"):
            ctx.assign_mocks(builder)
            with builder.block("await TestBed.configureTestingModule({", "}).compileComponents();"):
                if ctx.record.is_standalone:
                    builder.line(f"imports: [{name}],")
                else:
                    builder.line(f"declarations: [{name}],")
                _providers(builder, ctx.provider_lines())
            builder.line()
            builder.lines(
                f"fixture = TestBed.createComponent({name});",
                "component = fixture.componentInstance;",
                "fixture.detectChanges();",
            )
        builder.line()
        _creation_test(builder, "component", "should create")
        builder.line()
        with builder.block("it('should render', () => {"):
            builder.line("expect(fixture.nativeElement).toBeTruthy();")
    return builder.render()


def _element(tag: str, attribute: str = "") -> str:
    attributes = f" {attribute}" if attribute else ""
    if tag in VOID_ELEMENTS:
        return f"<{tag}{attributes} />"
    return f"<{tag}{attributes}></{tag}>"


def host_template(selector: str | None) -> tuple[str, bool]:
    """Template of the directive's test host and whether it matches the directive.

    Only the first selector of a selector list is used.

    >>> host_template("[appHighlight]")
    ('<div appHighlight></div>', True)
    >>> host_template("input[appAutofocus]")
    ('<input appAutofocus />', True)
    >>> host_template(None)
    ('<div></div>', False)
    """
    if selector:
        first = selector.split(",")[0].strip()
        if match := _ATTRIBUTE_SELECTOR.match(first):
            return _element(match.group("tag") or "div", match.group("attribute")), True
        if _ELEMENT_SELECTOR.match(first):
            return _element(first), True
    return "<div></div>", False


def directive_spec(ctx: SpecContext) -> str:
    name = ctx.subject
    standalone = ctx.record.is_standalone
    template, matches = host_template(ctx.record.selector)

    builder = SpecBuilder()
    builder.use("@angular/core", "Component")
    builder.use(ANGULAR_TESTING, "ComponentFixture", "TestBed")
    if matches:
        builder.use("@angular/platform-browser", "By")
    ctx.import_dependencies(builder)
    builder.use(ctx.subject_path, name)

    with builder.block("@Component({", "})"):
        builder.line(f"template: '{template}',")
        if standalone:
            builder.line("standalone: true,")
            builder.line(f"imports: [{name}],")
        else:
            builder.line("standalone: false,")
    builder.line("class TestHostComponent {}")
    builder.line()

    with builder.block(f"describe('{ctx.label}', () => {{"):
        builder.line("let fixture: ComponentFixture<TestHostComponent>;")
        ctx.declare_mocks(builder)
        builder.line()
        with builder.block("beforeEach(async () => {"):
            ctx.assign_mocks(builder)
            with builder.block("await TestBed.configureTestingModule({", "}).compileComponents();"):
                if standalone:
                    builder.line("imports: [TestHostComponent],")
                else:
                    builder.line(f"declarations: [TestHostComponent, {name}],")
                _providers(builder, ctx.provider_lines())
            builder.line()
            builder.lines(
                "fixture = TestBed.createComponent(TestHostComponent);",
                "fixture.detectChanges();",
            )
        builder.line()
        _creation_test(builder, "fixture.componentInstance", "should create the host component")
        builder.line()
        if matches:
            with builder.block("it('should apply the directive', () => {"):
                builder.line(f"const element = fixture.debugElement.query(By.directive({name}));")
                builder.line("expect(element).toBeTruthy();")
        else:
            with builder.block("it('should render the host element', () => {"):
                builder.line("expect(fixture.nativeElement.querySelector('div')).toBeTruthy();")
    return builder.render()


def _request_test(builder: SpecBuilder, method: MethodSignature) -> None:
    verb = infer_http_verb(method.name)
    with builder.block(f"it('should send a {verb} request from {method.name}', () => {{"):
        builder.line("let responded = false;")
        builder.line(
            f"service.{method.name}({placeholder_arguments(method)})"
            ".subscribe(() => (responded = true));"
        )
        builder.line()
        builder.line("const req = httpMock.expectOne(() => true);")
        builder.line(f"expect(req.request.method).toBe('{verb}');")
        builder.line(f"req.flush({flush_body(method.return_type)});")
        builder.line("expect(responded).toBe(true);")


def service_spec(ctx: SpecContext) -> str:
    name = ctx.subject
    needs_http = ctx.plan.needs_http

    builder = SpecBuilder()
    builder.use(ANGULAR_TESTING, "TestBed")
    ctx.import_dependencies(builder)
    if needs_http:
        builder.use(ANGULAR_HTTP_TESTING, "HttpTestingController")
    builder.use(ctx.subject_path, name)

    with builder.block(f"describe('{ctx.label}', () => {{"):
        builder.line(f"let service: {name};")
        if needs_http:
            builder.line("let httpMock: HttpTestingController;")
        ctx.declare_mocks(builder)
        builder.line()
        with builder.block("beforeEach(() => {"):
            ctx.assign_mocks(builder)
            with builder.block("TestBed.configureTestingModule({", "});"):
                _providers(builder, [f"{name},", *ctx.provider_lines()])
            builder.line()
            builder.line(f"service = TestBed.inject({name});")
            if needs_http:
                builder.line("httpMock = TestBed.inject(HttpTestingController);")
        builder.line()
        if needs_http:
            with builder.block("afterEach(() => {"):
                builder.line("httpMock.verify();")
            builder.line()
        _creation_test(builder, "service")
        if needs_http:
            for method in ctx.record.public_methods:
                if is_request_method(method):
                    builder.line()
                    _request_test(builder, method)
    return builder.render()


def module_spec(ctx: SpecContext) -> str:
    name = ctx.subject
    builder = SpecBuilder()
    builder.use(ANGULAR_TESTING, "TestBed")
    ctx.import_dependencies(builder)
    builder.use(ctx.subject_path, name)

    with builder.block(f"describe('{ctx.label}', () => {{"):
        ctx.declare_mocks(builder)
        if ctx.plan.mocks:
            builder.line()
        with builder.block("beforeEach(() => {"):
            ctx.assign_mocks(builder)
            with builder.block("TestBed.configureTestingModule({", "});"):
                builder.line(f"imports: [{name}],")
                _providers(builder, ctx.provider_lines())
        builder.line()
        with builder.block("it('should be created', () => {"):
            builder.line(f"expect(TestBed.inject({name})).toBeTruthy();")
    return builder.render()


def _route_function_spec(
    ctx: SpecContext, arguments: tuple[str, ...], title: str, is_guard: bool = False
) -> str:
    """Functional guards and resolvers, run through TestBed.runInInjectionContext.

    Guard results are checked against the shapes a guard may return (a
    boolean, a UrlTree, or an Observable/Promise of those); resolver results
    only have to be defined.
    """
    name = ctx.subject
    router_names = ["provideRouter"]
    if "mockRoute" in arguments:
        router_names += ["ActivatedRouteSnapshot", "RouterStateSnapshot"]
    if "{} as Route" in arguments:
        router_names += ["Route", "UrlSegment"]
    if is_guard:
        router_names.append("UrlTree")

    builder = SpecBuilder()
    builder.use(ANGULAR_TESTING, "TestBed")
    builder.use(ANGULAR_ROUTER, *router_names)
    if is_guard:
        builder.use("rxjs", "isObservable")
    ctx.import_dependencies(builder, exclude=ROUTER_NAMES)
    builder.use(ctx.subject_path, name)

    with builder.block(f"describe('{ctx.label}', () => {{"):
        ctx.declare_mocks(builder)
        if ctx.plan.mocks:
            builder.line()
        with builder.block("beforeEach(() => {"):
            ctx.assign_mocks(builder)
            with builder.block("TestBed.configureTestingModule({", "});"):
                _providers(builder, ["provideRouter([]),", *ctx.provider_lines(ROUTER_NAMES)])
        builder.line()
        with builder.block(f"it('{title}', () => {{"):
            with builder.block("const result = TestBed.runInInjectionContext(() => {"):
                if "mockRoute" in arguments:
                    builder.line("const mockRoute = {} as ActivatedRouteSnapshot;")
                    builder.line("const mockState = { url: '/test' } as RouterStateSnapshot;")
                builder.line(f"return {name}({', '.join(arguments)});")
            builder.line()
            if is_guard:
                builder.line(
                    "expect(typeof result === 'boolean' || result instanceof UrlTree || "
                    "isObservable(result) || result instanceof Promise).toBe(true);"
                )
            else:
                builder.line("expect(result).toBeDefined();")
    return builder.render()


def guard_spec(ctx: SpecContext) -> str:
    if ctx.record.is_functional:
        arguments = GUARD_ARGUMENTS.get(ctx.record.functional_type or "", DEFAULT_ROUTE_ARGUMENTS)
        return _route_function_spec(ctx, arguments, "should return a guard result", is_guard=True)
    return _injected_class_spec(ctx, "guard").render()


def resolver_spec(ctx: SpecContext) -> str:
    if ctx.record.is_functional:
        return _route_function_spec(ctx, DEFAULT_ROUTE_ARGUMENTS, "should resolve data")
    return _injected_class_spec(ctx, "resolver").render()


def _functional_interceptor_spec(ctx: SpecContext) -> str:
    name = ctx.subject
    builder = SpecBuilder()
    builder.use(ANGULAR_TESTING, "TestBed")
    builder.use(ANGULAR_HTTP, "HttpClient", "provideHttpClient", "withInterceptors")
    builder.use(ANGULAR_HTTP_TESTING, "HttpTestingController", "provideHttpClientTesting")
    ctx.import_dependencies(builder, exclude=(HTTP_CLIENT,))
    builder.use(ctx.subject_path, name)

    with builder.block(f"describe('{ctx.label}', () => {{"):
        builder.line("let httpClient: HttpClient;")
        builder.line("let httpMock: HttpTestingController;")
        ctx.declare_mocks(builder)
        builder.line()
        with builder.block("beforeEach(() => {"):
            ctx.assign_mocks(builder)
            with builder.block("TestBed.configureTestingModule({", "});"):
                _providers(
                    builder,
                    [
                        f"provideHttpClient(withInterceptors([{name}])),",
                        "provideHttpClientTesting(),",
                        *ctx.provider_lines((HTTP_CLIENT,)),
                    ],
                )
            builder.line()
            builder.line("httpClient = TestBed.inject(HttpClient);")
            builder.line("httpMock = TestBed.inject(HttpTestingController);")
        builder.line()
        with builder.block("afterEach(() => {"):
            builder.line("httpMock.verify();")
        builder.line()
        with builder.block("it('should pass requests through', () => {"):
            builder.line("httpClient.get('/api/test').subscribe();")
            builder.line()
            builder.line("const req = httpMock.expectOne((request) => request.url.endsWith('/api/test'));")
            builder.line("expect(req.request).toBeTruthy();")
            builder.line("req.flush({});")
    return builder.render()


def interceptor_spec(ctx: SpecContext) -> str:
    if ctx.record.is_functional:
        return _functional_interceptor_spec(ctx)
    builder = _injected_class_spec(
        ctx,
        "interceptor",
        leading=["provideHttpClient(),", "provideHttpClientTesting(),"],
        exclude=(HTTP_CLIENT,),
    )
    builder.use(ANGULAR_HTTP, "provideHttpClient")
    builder.use(ANGULAR_HTTP_TESTING, "provideHttpClientTesting")
    return builder.render()


def _transform_arguments(ctx: SpecContext) -> str:
    for method in ctx.record.public_methods:
        if method.name == "transform" and method.parameters:
            return placeholder_arguments(method)
    return "'test'"


def pipe_spec(ctx: SpecContext) -> str:
    name = ctx.subject

    def transform_test(builder: SpecBuilder) -> None:
        with builder.block("it('should transform a value', () => {"):
            builder.line(f"const result = pipe.transform({_transform_arguments(ctx)});")
            builder.line("expect(result).toBeDefined();")

    if ctx.record.dependencies:
        return _injected_class_spec(ctx, "pipe", extra_tests=transform_test).render()

    builder = SpecBuilder()
    builder.use(ctx.subject_path, name)
    with builder.block(f"describe('{ctx.label}', () => {{"):
        builder.line(f"let pipe: {name};")
        builder.line()
        with builder.block("beforeEach(() => {"):
            builder.line(f"pipe = new {name}();")
        builder.line()
        _creation_test(builder, "pipe")
        builder.line()
        transform_test(builder)
    return builder.render()


def model_spec(ctx: SpecContext) -> str:
    name = ctx.subject
    builder = SpecBuilder()
    builder.use(ctx.subject_path, name)
    with builder.block(f"describe('{ctx.label}', () => {{"):
        with builder.block("it('should be defined', () => {"):
            builder.line(f"expect({name}).toBeDefined();")
        builder.line()
        with builder.block("it('should create an instance', () => {"):
            builder.line(f"const instance = new {name}();")
            builder.line("expect(instance).toBeTruthy();")
    return builder.render()


def generic_spec(ctx: SpecContext) -> str:
    """Fallback for records with no recognizable export."""
    builder = SpecBuilder()
    builder.use_namespace("subject", ctx.subject_path)
    with builder.block(f"describe('{ctx.label}', () => {{"):
        with builder.block("it('should load the module', () => {"):
            builder.line("expect(subject).toBeDefined();")
    return builder.render()
